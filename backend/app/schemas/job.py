from decimal import Decimal

from pydantic import AliasChoices, BaseModel, Field, ValidationInfo, field_validator

from app.schemas.entities import CategoryData, JobData


class JobPayload(BaseModel):
    """Fields accepted when creating a job or saving the editor."""

    title: str = Field(min_length=5)
    description: str = Field(min_length=100)
    category: int
    rate: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    expeditate_rate: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    min_words: int = Field(
        ge=0,
        validation_alias=AliasChoices("minWords", "min_words"),
        serialization_alias="minWords",
    )
    revision_number: int = Field(ge=0)
    delivery_guarantee: int = Field(ge=1)
    delivery_expeditate: int | None = Field(default=None, ge=1, validate_default=True)
    banner: list[int] = []

    @field_validator("delivery_expeditate")
    @classmethod
    def _required_with_expedite_rate(cls, value, info: ValidationInfo):
        if value is None and info.data.get("expeditate_rate") is not None:
            raise ValueError("required when expeditate_rate is present")
        return value

    def job_values(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "rate": self.rate,
            "expeditate_rate": self.expeditate_rate,
            "min_words": self.min_words,
            "revision_number": self.revision_number,
            "delivery_guarantee": self.delivery_guarantee,
            "delivery_expeditate": self.delivery_expeditate,
            "category_id": self.category,
        }


class DeclineRequest(BaseModel):
    reason: str | None = None


class ActionResponse(BaseModel):
    outcome: str
    message: str
    redirect_to: str | None = None


class JobListResponse(BaseModel):
    jobs: list[JobData]
    total: int
    page: int
    per_page: int


class EditorResponse(BaseModel):
    job: JobData
    categories: list[CategoryData]
