from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, ClassVar, Optional

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StringConstraints,
    computed_field,
)

from roadblock.validation import PositiveWholeNumber, Refinement


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


Username = Annotated[str, StringConstraints(strip_whitespace=True, to_lower=True, min_length=4, max_length=50)]
Password = Annotated[str, StringConstraints(strip_whitespace=True, min_length=4, max_length=50)]
PositiveDecimal = Annotated[Decimal, Field(gt=0, max_digits=12, decimal_places=2)]

RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
ImageId = Annotated[str, StringConstraints(strip_whitespace=True, max_length=800)]
ShortText = Annotated[str, StringConstraints(strip_whitespace=True, max_length=50)]
OptionalText = Annotated[Optional[ShortText], BeforeValidator(_blank_to_none)]
OptionalPositiveInt = Annotated[Optional[PositiveWholeNumber], BeforeValidator(_blank_to_none)]
OptionalDate = Annotated[Optional[date], BeforeValidator(_blank_to_none)]


def _passwords_match(form) -> bool:
    return form.password == form.password_confirmation


# ————— Forms —————

class LoginForm(BaseModel):
    username: Annotated[str, StringConstraints(strip_whitespace=True, to_lower=True, min_length=1, max_length=50)]
    password: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]
    redirect_to: str = '/'
    remember: bool = False


class CreateAccountForm(BaseModel):
    username: Username
    password: Password
    password_confirmation: Password
    redirect_to: str = '/'

    refinements: ClassVar[tuple] = (
        Refinement(_passwords_match, "Passwords don't match", 'password_confirmation'),
    )


class ChangeUsernameForm(BaseModel):
    username: Username


class ChangePasswordForm(BaseModel):
    current_password: Annotated[str, StringConstraints(min_length=1, max_length=50)]
    new_password: Password
    password_confirmation: Password

    refinements: ClassVar[tuple] = (
        Refinement(lambda form: form.new_password == form.password_confirmation,
                   "Passwords don't match", 'password_confirmation'),
    )


class VehicleForm(BaseModel):
    """A vehicle together with the driver who owns it."""

    plate_number: RequiredText
    make_and_model: RequiredText
    fines_due: PositiveDecimal
    vehicle_image: ImageId = ''
    year: OptionalText = None
    colour: OptionalText = None
    weight: OptionalPositiveInt = None
    net_weight: OptionalPositiveInt = None

    full_name: RequiredText
    license_number: RequiredText
    driver_image: ImageId = ''
    national_id: OptionalText = None
    dob: OptionalDate = None
    phone: OptionalText = None
    defensive: OptionalText = None
    medical: OptionalText = None
    licence_class: OptionalText = None
    licence_year: OptionalText = None

    def vehicle_values(self) -> dict:
        return {
            'plate_number': self.plate_number,
            'make_and_model': self.make_and_model,
            'fines_due': self.fines_due,
            'image': self.vehicle_image,
            'year': self.year,
            'colour': self.colour,
            'weight': self.weight,
            'net_weight': self.net_weight,
        }

    def driver_values(self) -> dict:
        return {
            'full_name': self.full_name,
            'license_number': self.license_number,
            'image': self.driver_image,
            'national_id': self.national_id,
            'dob': self.dob,
            'phone': self.phone,
            'defensive': self.defensive,
            'medical': self.medical,
            'licence_class': self.licence_class,
            'licence_year': self.licence_year,
        }


class AmountForm(BaseModel):
    amount: PositiveDecimal


# ————— Responses —————

class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str


class PaymentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    vehicle_id: int
    amount: Decimal
    created_at: datetime


class DriverOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    full_name: str
    license_number: str
    image: str
    national_id: Optional[str] = None
    dob: Optional[date] = None
    phone: Optional[str] = None
    defensive: Optional[str] = None
    medical: Optional[str] = None
    licence_class: Optional[str] = None
    licence_year: Optional[str] = None


class VehicleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    plate_number: str
    make_and_model: str
    image: str
    fines_due: Decimal
    year: Optional[str] = None
    colour: Optional[str] = None
    weight: Optional[int] = None
    net_weight: Optional[int] = None
    driver_id: int


class VehicleWithPayments(VehicleOut):
    payments: list[PaymentOut] = []

    @computed_field
    @property
    def total_payments(self) -> Decimal:
        return sum((payment.amount for payment in self.payments), Decimal('0'))


class VehicleDetail(VehicleWithPayments):
    driver: DriverOut


class DriverWithVehicles(DriverOut):
    vehicles: list[VehicleOut] = []


class DriverDetail(DriverOut):
    vehicles: list[VehicleWithPayments] = []


class ImageLinks(BaseModel):
    thumbnail: Optional[str] = None
    upload_thumbnail: Optional[str] = None
    full: Optional[str] = None


class CloudinaryParams(BaseModel):
    cloud_name: str
    upload_preset: str


class VehiclePage(CloudinaryParams):
    vehicle: VehicleDetail
    vehicle_image: ImageLinks
    driver_image: ImageLinks


class VehicleListPage(BaseModel):
    vehicles: list[VehicleDetail]
