"""Plain data entities handed out by the job store.

These never lazy-load anything: whatever a caller needs (owner roles,
category floors, banner links) is resolved by the store up front.
"""
from decimal import Decimal
from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

ELEVATED_ROLES = frozenset({"admin", "developer"})


class JobStatus(str, Enum):
    INACTIVE = "inactive"
    ACTIVE = "active"
    DECLINED = "declined"


class CategoryStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class UserData(BaseModel):
    id: int
    email: str
    name: str
    verified: bool = False
    paypal_email: str | None = None
    roles: list[str] = []

    @property
    def has_payment_account(self) -> bool:
        return bool(self.paypal_email)

    @property
    def is_elevated(self) -> bool:
        return any(role in ELEVATED_ROLES for role in self.roles)


class CategoryData(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    status: CategoryStatus
    min_rate: Decimal = Decimal("0")
    min_expedite_rate: Decimal = Decimal("0")


class BannerData(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    link: str
    job_id: int | None
    created_at: str


class JobData(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    uuid: str
    title: str
    description: str
    rate: Decimal | None
    expeditate_rate: Decimal | None
    min_words: int = Field(
        validation_alias=AliasChoices("minWords", "min_words"),
        serialization_alias="minWords",
    )
    revision_number: int
    delivery_guarantee: int | None
    delivery_expeditate: int | None
    category_id: int
    user_id: int
    status: JobStatus
    created_at: str
    updated_at: str


class JobDetail(JobData):
    category_name: str
    image: str
    has_paypal: bool
