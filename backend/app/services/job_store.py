from datetime import datetime, timezone
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.banner import Banner
from app.models.category import Category
from app.models.job import Job
from app.models.user import User
from app.schemas.entities import (
    BannerData,
    CategoryData,
    CategoryStatus,
    JobData,
    JobStatus,
    UserData,
)
from app.utils.security import generate_public_id


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def user_to_data(user: User) -> UserData:
    return UserData(
        id=user.id,
        email=user.email,
        name=user.name,
        verified=bool(user.verified),
        paypal_email=user.paypal_email,
        roles=sorted(r.name for r in user.roles),
    )


class JobStore(Protocol):
    """Persistence operations the job lifecycle depends on."""

    def get_user(self, user_id: int) -> UserData | None: ...

    def get_job(self, job_id: int) -> JobData | None: ...

    def get_job_by_uuid(self, uuid: str, status: JobStatus | None = None) -> JobData | None: ...

    def list_jobs(
        self,
        owner_id: int | None = None,
        status: JobStatus | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[list[JobData], int]: ...

    def create_job(self, owner_id: int, values: dict) -> JobData: ...

    def update_job(self, job_id: int, values: dict) -> JobData: ...

    def delete_job(self, job_id: int) -> None: ...

    def get_category(self, category_id: int) -> CategoryData | None: ...

    def list_categories(self, status: CategoryStatus | None = None) -> list[CategoryData]: ...

    def create_banner(self, link: str) -> BannerData: ...

    def link_banners(self, banner_ids: list[int], job_id: int) -> list[BannerData]: ...

    def unlinked_banners(self) -> list[BannerData]: ...

    def first_banner(self, job_id: int) -> BannerData | None: ...

    def delete_banner(self, banner_id: int) -> None: ...


class SqlJobStore:
    """JobStore backed by a SQLAlchemy session. Every write commits."""

    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> UserData | None:
        user = self.db.query(User).filter(User.id == user_id).first()
        return user_to_data(user) if user else None

    def get_job(self, job_id: int) -> JobData | None:
        job = self.db.query(Job).filter(Job.id == job_id).first()
        return JobData.model_validate(job) if job else None

    def get_job_by_uuid(self, uuid: str, status: JobStatus | None = None) -> JobData | None:
        query = self.db.query(Job).filter(Job.uuid == uuid)
        if status:
            query = query.filter(Job.status == status.value)
        job = query.first()
        return JobData.model_validate(job) if job else None

    def list_jobs(
        self,
        owner_id: int | None = None,
        status: JobStatus | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[list[JobData], int]:
        query = self.db.query(Job)
        if owner_id is not None:
            query = query.filter(Job.user_id == owner_id)
        if status:
            query = query.filter(Job.status == status.value)

        total = query.count()
        jobs = (
            query.order_by(Job.created_at.desc(), Job.id.desc())
            .offset((page - 1) * per_page)
            .limit(per_page)
            .all()
        )
        return [JobData.model_validate(j) for j in jobs], total

    def create_job(self, owner_id: int, values: dict) -> JobData:
        now = _now()
        job = Job(
            uuid=generate_public_id(),
            user_id=owner_id,
            status=JobStatus.INACTIVE.value,
            created_at=now,
            updated_at=now,
            **values,
        )
        self.db.add(job)
        self.db.commit()
        self.db.refresh(job)
        return JobData.model_validate(job)

    def update_job(self, job_id: int, values: dict) -> JobData:
        job = self.db.query(Job).filter(Job.id == job_id).one()
        for key, value in values.items():
            if isinstance(value, JobStatus):
                value = value.value
            setattr(job, key, value)
        job.updated_at = _now()
        self.db.commit()
        self.db.refresh(job)
        return JobData.model_validate(job)

    def delete_job(self, job_id: int) -> None:
        job = self.db.query(Job).filter(Job.id == job_id).first()
        if job:
            self.db.delete(job)
            self.db.commit()

    def get_category(self, category_id: int) -> CategoryData | None:
        category = self.db.query(Category).filter(Category.id == category_id).first()
        return CategoryData.model_validate(category) if category else None

    def list_categories(self, status: CategoryStatus | None = None) -> list[CategoryData]:
        query = self.db.query(Category)
        if status:
            query = query.filter(Category.status == status.value)
        return [CategoryData.model_validate(c) for c in query.order_by(Category.title.asc()).all()]

    def create_banner(self, link: str) -> BannerData:
        banner = Banner(link=link, job_id=None, created_at=_now())
        self.db.add(banner)
        self.db.commit()
        self.db.refresh(banner)
        return BannerData.model_validate(banner)

    def link_banners(self, banner_ids: list[int], job_id: int) -> list[BannerData]:
        if not banner_ids:
            return []
        banners = (
            self.db.query(Banner)
            .filter(Banner.id.in_(banner_ids), Banner.job_id.is_(None))
            .all()
        )
        for banner in banners:
            banner.job_id = job_id
        self.db.commit()
        return [BannerData.model_validate(b) for b in banners]

    def unlinked_banners(self) -> list[BannerData]:
        banners = self.db.query(Banner).filter(Banner.job_id.is_(None)).order_by(Banner.id.asc()).all()
        return [BannerData.model_validate(b) for b in banners]

    def first_banner(self, job_id: int) -> BannerData | None:
        banner = (
            self.db.query(Banner)
            .filter(Banner.job_id == job_id)
            .order_by(Banner.id.asc())
            .first()
        )
        return BannerData.model_validate(banner) if banner else None

    def delete_banner(self, banner_id: int) -> None:
        banner = self.db.query(Banner).filter(Banner.id == banner_id).first()
        if not banner:
            return
        try:
            self.db.delete(banner)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
