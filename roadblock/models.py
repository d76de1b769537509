from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from roadblock.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)


class Driver(Base):
    __tablename__ = 'drivers'

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    full_name = Column(String(255), nullable=False)
    license_number = Column(String(255), nullable=False, index=True)
    image = Column(String(800), nullable=False, default='')

    national_id = Column(String(50))
    dob = Column(Date)
    phone = Column(String(50))
    defensive = Column(String(50))
    medical = Column(String(50))
    licence_class = Column(String(50))
    licence_year = Column(String(50))

    vehicles = relationship('Vehicle', back_populates='driver')


class Vehicle(Base):
    __tablename__ = 'vehicles'

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    plate_number = Column(String(255), nullable=False, index=True)
    make_and_model = Column(String(255), nullable=False)
    image = Column(String(800), nullable=False, default='')
    fines_due = Column(Numeric(12, 2), nullable=False, default=0)

    year = Column(String(50))
    colour = Column(String(50))
    weight = Column(Integer)
    net_weight = Column(Integer)

    driver_id = Column(Integer, ForeignKey('drivers.id'), nullable=False, index=True)

    driver = relationship('Driver', back_populates='vehicles')
    payments = relationship(
        'Payment',
        back_populates='vehicle',
        cascade='all, delete-orphan',
        order_by='Payment.id',
    )


class Payment(Base):
    __tablename__ = 'payments'

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    vehicle_id = Column(Integer, ForeignKey('vehicles.id'), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    created_at = Column(DateTime, nullable=False, default=_utcnow)

    vehicle = relationship('Vehicle', back_populates='payments')
