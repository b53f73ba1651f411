"""Job posting lifecycle.

A job is created ``inactive`` and waits for review. Review either publishes
it (``active``) or declines it with a reason (``declined``). Saving the
editor always sends the job back to ``inactive``. Deleting removes the row.

Every transition except creation is gated on the same rule: the actor owns
the job or holds an elevated role. A failed guard is not an exception; the
manager returns an :class:`ActionResult` and leaves rendering to the caller.
"""
import logging
from enum import Enum

from pydantic import BaseModel

from app.config import settings
from app.errors import JobValidationError, PreconditionFailed
from app.schemas.entities import (
    CategoryData,
    CategoryStatus,
    JobData,
    JobDetail,
    JobStatus,
    UserData,
)
from app.schemas.job import JobPayload
from app.services.job_store import JobStore
from app.services.job_validation import category_errors
from app.services.notification_service import Notifier
from app.services.storage_service import FileStorage

logger = logging.getLogger("app.jobs")

# event -> (states it may fire from, resulting state)
TRANSITIONS: dict[str, tuple[frozenset[JobStatus], JobStatus]] = {
    "activate": (frozenset({JobStatus.INACTIVE}), JobStatus.ACTIVE),
    "decline": (frozenset({JobStatus.INACTIVE}), JobStatus.DECLINED),
}


class Outcome(str, Enum):
    SUCCESS = "success"
    DENIED = "denied"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"


class ActionResult(BaseModel):
    outcome: Outcome
    message: str = ""
    job: JobData | None = None
    categories: list[CategoryData] = []

    @property
    def ok(self) -> bool:
        return self.outcome == Outcome.SUCCESS


PERMISSION_DENIED = "Permission denied!"
SAVE_FAILED = "Could not save changes!"
NOT_AWAITING_REVIEW = "Job is not awaiting review."
JOB_NOT_FOUND = "Job not found"


def can_manage(actor: UserData, job: JobData) -> bool:
    return job.user_id == actor.id or actor.is_elevated


def banner_image(link: str | None, width: int, height: int) -> str:
    return f"{settings.media_url}/{link or settings.default_banner}?w={width}&h={height}"


class JobLifecycleManager:
    def __init__(self, store: JobStore, notifier: Notifier, storage: FileStorage):
        self.store = store
        self.notifier = notifier
        self.storage = storage

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_for(
        self,
        actor: UserData,
        status: JobStatus | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[list[JobData], int]:
        owner_id = None if actor.is_elevated else actor.id
        return self.store.list_jobs(owner_id=owner_id, status=status, page=page, per_page=per_page)

    def pending(self, page: int = 1, per_page: int = 20) -> tuple[list[JobData], int]:
        return self.store.list_jobs(status=JobStatus.INACTIVE, page=page, per_page=per_page)

    def show(self, job_id: int) -> ActionResult:
        job = self.store.get_job(job_id)
        if not job:
            return ActionResult(outcome=Outcome.NOT_FOUND, message=JOB_NOT_FOUND)

        category = self.store.get_category(job.category_id)
        owner = self.store.get_user(job.user_id)
        banner = self.store.first_banner(job.id)
        detail = JobDetail(
            **job.model_dump(),
            category_name=category.title if category else "",
            image=banner_image(
                banner.link if banner else None,
                settings.banner_width,
                settings.banner_height,
            ),
            has_paypal=bool(owner and owner.has_payment_account),
        )
        return ActionResult(outcome=Outcome.SUCCESS, job=detail)

    def profile(self, uuid: str) -> ActionResult:
        job = self.store.get_job_by_uuid(uuid, status=JobStatus.ACTIVE)
        if not job:
            return ActionResult(outcome=Outcome.NOT_FOUND, message=JOB_NOT_FOUND)
        return ActionResult(outcome=Outcome.SUCCESS, job=job)

    def editor(self, actor: UserData, uuid: str) -> ActionResult:
        job = self.store.get_job_by_uuid(uuid)
        # Forbidden and missing look the same from outside.
        if not job or not can_manage(actor, job):
            return ActionResult(outcome=Outcome.NOT_FOUND, message=JOB_NOT_FOUND)
        return ActionResult(
            outcome=Outcome.SUCCESS,
            job=job,
            categories=self.store.list_categories(CategoryStatus.ACTIVE),
        )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def check_can_create(self, actor: UserData):
        if not actor.has_payment_account:
            raise PreconditionFailed("payment_account_missing", "Payment account not set!")
        if not actor.verified:
            raise PreconditionFailed("email_unverified", "Email not confirmed!")

    def create(self, actor: UserData, payload: JobPayload) -> JobData:
        self.check_can_create(actor)
        self._validate(payload)

        job = self.store.create_job(actor.id, payload.job_values())
        linked = self.store.link_banners(payload.banner, job.id)
        logger.info("Job %s created by user %s with %d banner(s)", job.id, actor.id, len(linked))

        self.sweep_orphaned_banners()
        return job

    def activate(self, actor: UserData, job_id: int) -> ActionResult:
        result = self._transition("activate", actor, job_id)
        if result.ok:
            owner = self.store.get_user(result.job.user_id)
            self.notifier.send("job_published", owner, job=result.job)
            result.message = "Job published successfully!"
        return result

    def decline(self, actor: UserData, job_id: int, reason: str | None = None) -> ActionResult:
        result = self._transition("decline", actor, job_id)
        if result.ok:
            owner = self.store.get_user(result.job.user_id)
            self.notifier.send(
                "job_declined", owner, job=result.job, reason=reason or "No reason given."
            )
            result.message = "Job declined successfully!"
        return result

    def delete(self, actor: UserData, job_id: int) -> ActionResult:
        job = self.store.get_job(job_id)
        if not job:
            return ActionResult(outcome=Outcome.NOT_FOUND, message=JOB_NOT_FOUND)
        if not can_manage(actor, job):
            logger.warning("User %s denied delete on job %s", actor.id, job_id)
            return ActionResult(outcome=Outcome.DENIED, message=PERMISSION_DENIED, job=job)

        self.store.delete_job(job_id)
        logger.info("Job %s deleted by user %s", job_id, actor.id)
        return ActionResult(outcome=Outcome.SUCCESS, message="Job deleted successfully!", job=job)

    def save(self, actor: UserData, uuid: str, payload: JobPayload) -> ActionResult:
        job = self.store.get_job_by_uuid(uuid)
        if not job or not can_manage(actor, job):
            return ActionResult(outcome=Outcome.DENIED, message=SAVE_FAILED)

        self._validate(payload)
        values = payload.job_values()
        values["status"] = JobStatus.INACTIVE
        updated = self.store.update_job(job.id, values)
        logger.info("Job %s edited by user %s, back to review", job.id, actor.id)
        return ActionResult(outcome=Outcome.SUCCESS, message="Changes saved!", job=updated)

    # ------------------------------------------------------------------
    # Banners
    # ------------------------------------------------------------------

    def sweep_orphaned_banners(self) -> int:
        """Delete every banner that is not linked to a job. Returns how many
        records were removed; failures are logged per banner and skipped."""
        removed = 0
        for banner in self.store.unlinked_banners():
            try:
                self.storage.delete(banner.link)
            except Exception:
                logger.exception("Could not delete banner file %s", banner.link)
            try:
                self.store.delete_banner(banner.id)
                removed += 1
            except Exception:
                logger.exception("Could not delete banner record %s", banner.id)
        if removed:
            logger.info("Swept %d orphaned banner(s)", removed)
        return removed

    # ------------------------------------------------------------------

    def _validate(self, payload: JobPayload):
        errors = category_errors(payload, self.store.get_category(payload.category))
        if errors:
            raise JobValidationError(errors)

    def _transition(self, event: str, actor: UserData, job_id: int) -> ActionResult:
        sources, target = TRANSITIONS[event]
        job = self.store.get_job(job_id)
        if not job:
            return ActionResult(outcome=Outcome.NOT_FOUND, message=JOB_NOT_FOUND)
        if not can_manage(actor, job):
            logger.warning("User %s denied %s on job %s", actor.id, event, job_id)
            return ActionResult(outcome=Outcome.DENIED, message=PERMISSION_DENIED, job=job)
        if job.status not in sources:
            return ActionResult(outcome=Outcome.CONFLICT, message=NOT_AWAITING_REVIEW, job=job)

        updated = self.store.update_job(job.id, {"status": target})
        logger.info("Job %s %s -> %s by user %s", job.id, job.status.value, target.value, actor.id)
        return ActionResult(outcome=Outcome.SUCCESS, job=updated)
