from decimal import Decimal

from app.schemas.entities import CategoryData, CategoryStatus
from app.schemas.job import JobPayload


def category_is_selectable(category: CategoryData | None) -> bool:
    return category is not None and category.status == CategoryStatus.ACTIVE


def meets_floor(value: Decimal | None, floor: Decimal) -> bool:
    return value is None or value >= floor


def category_errors(payload: JobPayload, category: CategoryData | None) -> dict[str, list[str]]:
    """Check the rate fields against the floors of the selected category."""
    if not category_is_selectable(category):
        return {"category": ["The selected category is invalid."]}

    errors: dict[str, list[str]] = {}
    if not meets_floor(payload.rate, category.min_rate):
        errors["rate"] = [f"The rate must be at least {category.min_rate}."]
    if not meets_floor(payload.expeditate_rate, category.min_expedite_rate):
        errors["expeditate_rate"] = [
            f"The expedite rate must be at least {category.min_expedite_rate}."
        ]
    return errors
