from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, selectinload

from roadblock.dependencies import get_current_user, get_db
from roadblock.errors import BadRequest, NotFound
from roadblock.models import Driver, Vehicle
from roadblock.schemas import DriverDetail, DriverWithVehicles
from roadblock.validation import parse_positive_int

router = APIRouter(prefix='/drivers', tags=['Drivers'], dependencies=[Depends(get_current_user)])


@router.get('', response_model=list[DriverWithVehicles])
def drivers(db: Session = Depends(get_db)):
    return db.query(Driver).options(selectinload(Driver.vehicles)).order_by(Driver.id).all()


@router.get('/{driver_id}', response_model=DriverDetail)
def driver(driver_id: str, db: Session = Depends(get_db)):
    driver_id = parse_positive_int(driver_id)
    if driver_id is None:
        raise BadRequest('Invalid driver ID')

    driver = (
        db.query(Driver)
        .options(selectinload(Driver.vehicles).selectinload(Vehicle.payments))
        .filter(Driver.id == driver_id)
        .first()
    )
    if driver is None:
        raise NotFound('Driver record not found')
    return driver
