import logging
from decimal import Decimal

from fastapi import APIRouter, Depends, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session, joinedload, selectinload

from roadblock.config import Settings
from roadblock.dependencies import get_current_user, get_db, get_form_fields, get_settings
from roadblock.errors import BadRequest, NotFound
from roadblock.images import image_links
from roadblock.models import Driver, Payment, Vehicle
from roadblock.schemas import (
    AmountForm,
    CloudinaryParams,
    VehicleDetail,
    VehicleForm,
    VehicleListPage,
    VehiclePage,
)
from roadblock.validation import ValidationFailure, parse_positive_int, validate_form

logger = logging.getLogger(__name__)

router = APIRouter(tags=['Vehicles'], dependencies=[Depends(get_current_user)])

# -------------------------
# CRUD Logic
# -------------------------


def _vehicles(db: Session):
    return db.query(Vehicle).options(joinedload(Vehicle.driver), selectinload(Vehicle.payments))


def list_vehicles(db: Session) -> list[Vehicle]:
    return _vehicles(db).order_by(Vehicle.id).all()


def get_vehicle(db: Session, vehicle_id: int) -> Vehicle:
    vehicle = _vehicles(db).filter(Vehicle.id == vehicle_id).first()
    if vehicle is None:
        raise NotFound('Vehicle record not found')
    return vehicle


def create_vehicle(db: Session, form: VehicleForm) -> Vehicle:
    # vehicle and driver are written in one transaction
    vehicle = Vehicle(**form.vehicle_values(), driver=Driver(**form.driver_values()))
    db.add(vehicle)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(vehicle)
    logger.info('Created vehicle %s (%s)', vehicle.id, vehicle.plate_number)
    return vehicle


def update_vehicle(db: Session, vehicle: Vehicle, form: VehicleForm) -> Vehicle:
    for key, value in form.vehicle_values().items():
        setattr(vehicle, key, value)
    for key, value in form.driver_values().items():
        setattr(vehicle.driver, key, value)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info('Updated vehicle %s', vehicle.id)
    return vehicle


def delete_vehicle(db: Session, vehicle: Vehicle) -> None:
    # payments go with the vehicle, the driver stays
    vehicle_id = vehicle.id
    db.delete(vehicle)
    db.commit()
    logger.info('Deleted vehicle %s', vehicle_id)


def add_fine(db: Session, vehicle_id: int, amount: Decimal) -> None:
    updated = (
        db.query(Vehicle)
        .filter(Vehicle.id == vehicle_id)
        .update({Vehicle.fines_due: Vehicle.fines_due + amount}, synchronize_session=False)
    )
    if not updated:
        db.rollback()
        raise NotFound('Vehicle record not found')
    db.commit()
    logger.info('Added fine of %s to vehicle %s', amount, vehicle_id)


def record_payment(db: Session, vehicle_id: int, amount: Decimal) -> Payment:
    if db.get(Vehicle, vehicle_id) is None:
        raise NotFound('Vehicle record not found')
    payment = Payment(vehicle_id=vehicle_id, amount=amount)
    db.add(payment)
    db.commit()
    db.refresh(payment)
    logger.info('Recorded payment %s of %s for vehicle %s', payment.id, amount, vehicle_id)
    return payment


def delete_payment(db: Session, vehicle_id: int, payment_id: int) -> None:
    payment = (
        db.query(Payment)
        .filter(Payment.id == payment_id, Payment.vehicle_id == vehicle_id)
        .first()
    )
    if payment is None:
        raise NotFound('Payment record not found')
    db.delete(payment)
    db.commit()
    logger.info('Deleted payment %s of vehicle %s', payment_id, vehicle_id)


# -------------------------
# Routes
# -------------------------


def _vehicle_id(raw: str) -> int:
    vehicle_id = parse_positive_int(raw)
    if vehicle_id is None:
        raise BadRequest('Invalid vehicle ID')
    return vehicle_id


def _cloudinary(settings: Settings) -> CloudinaryParams:
    return CloudinaryParams(
        cloud_name=settings.CLOUDINARY_CLOUD_NAME,
        upload_preset=settings.CLOUDINARY_UPLOAD_PRESET,
    )


def _vehicle_page(vehicle: Vehicle, settings: Settings) -> VehiclePage:
    cloud_name = settings.CLOUDINARY_CLOUD_NAME
    return VehiclePage(
        **_cloudinary(settings).model_dump(),
        vehicle=VehicleDetail.model_validate(vehicle),
        vehicle_image=image_links(cloud_name, vehicle.image),
        driver_image=image_links(cloud_name, vehicle.driver.image),
    )


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)


@router.get('/')
def index():
    return _redirect('/vehicles')


@router.get('/vehicles', response_model=VehicleListPage)
def vehicles(db: Session = Depends(get_db)):
    return VehicleListPage(vehicles=[VehicleDetail.model_validate(v) for v in list_vehicles(db)])


@router.get('/vehicles/new', response_model=CloudinaryParams)
def new_vehicle_page(settings: Settings = Depends(get_settings)):
    return _cloudinary(settings)


@router.post('/vehicles/new')
def new_vehicle(fields: dict = Depends(get_form_fields), db: Session = Depends(get_db)):
    form = validate_form(VehicleForm, fields)
    if isinstance(form, ValidationFailure):
        return form.to_response()

    vehicle = create_vehicle(db, form)
    return _redirect(f'/vehicles/{vehicle.id}')


@router.get('/vehicles/{vehicle_id}', response_model=VehiclePage)
def vehicle_page(vehicle_id: str, db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    return _vehicle_page(get_vehicle(db, _vehicle_id(vehicle_id)), settings)


@router.post('/vehicles/{vehicle_id}')
def vehicle_action(
    vehicle_id: str,
    fields: dict = Depends(get_form_fields),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    vehicle_id = _vehicle_id(vehicle_id)
    intent = fields.get('_method')

    if intent == 'delete':
        delete_vehicle(db, get_vehicle(db, vehicle_id))
        return _redirect('/vehicles')

    if intent == 'delete_payment':
        payment_id = parse_positive_int(fields.get('payment_id'))
        if payment_id is None:
            raise BadRequest('Invalid payment ID')
        delete_payment(db, vehicle_id, payment_id)
        return _vehicle_page(get_vehicle(db, vehicle_id), settings)

    return _redirect('/vehicles')


@router.get('/vehicles/{vehicle_id}/edit', response_model=VehiclePage)
def edit_vehicle_page(vehicle_id: str, db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    return _vehicle_page(get_vehicle(db, _vehicle_id(vehicle_id)), settings)


@router.post('/vehicles/{vehicle_id}/edit')
def edit_vehicle(vehicle_id: str, fields: dict = Depends(get_form_fields), db: Session = Depends(get_db)):
    vehicle = get_vehicle(db, _vehicle_id(vehicle_id))

    form = validate_form(VehicleForm, fields)
    if isinstance(form, ValidationFailure):
        return form.to_response()

    update_vehicle(db, vehicle, form)
    return _redirect(f'/vehicles/{vehicle.id}')


@router.post('/vehicles/{vehicle_id}/add-fine')
def vehicle_add_fine(vehicle_id: str, fields: dict = Depends(get_form_fields), db: Session = Depends(get_db)):
    vehicle_id = _vehicle_id(vehicle_id)

    form = validate_form(AmountForm, fields)
    if isinstance(form, ValidationFailure):
        return form.to_response()

    add_fine(db, vehicle_id, form.amount)
    return _redirect(f'/vehicles/{vehicle_id}')


@router.get('/vehicles/{vehicle_id}/record-payment', response_model=VehiclePage)
def record_payment_page(vehicle_id: str, db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    return _vehicle_page(get_vehicle(db, _vehicle_id(vehicle_id)), settings)


@router.post('/vehicles/{vehicle_id}/record-payment')
def vehicle_record_payment(vehicle_id: str, fields: dict = Depends(get_form_fields), db: Session = Depends(get_db)):
    vehicle_id = _vehicle_id(vehicle_id)

    form = validate_form(AmountForm, fields)
    if isinstance(form, ValidationFailure):
        return form.to_response()

    record_payment(db, vehicle_id, form.amount)
    return _redirect(f'/vehicles/{vehicle_id}')
