from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_actor
from app.schemas.entities import CategoryData, CategoryStatus
from app.services.job_store import SqlJobStore

router = APIRouter(
    prefix="/categories",
    tags=["categories"],
    dependencies=[Depends(get_current_actor)],
)


@router.get("", response_model=list[CategoryData])
async def list_categories(db: Session = Depends(get_db)):
    """Categories a job may currently be filed under."""
    return SqlJobStore(db).list_categories(CategoryStatus.ACTIVE)
