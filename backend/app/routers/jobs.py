from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from app.dependencies import (
    get_current_actor,
    get_lifecycle_manager,
    require_elevated_role,
    require_publishing_account,
)
from app.schemas.entities import JobData, JobDetail, JobStatus, UserData
from app.schemas.job import (
    ActionResponse,
    DeclineRequest,
    EditorResponse,
    JobListResponse,
    JobPayload,
)
from app.services.job_lifecycle import ActionResult, JobLifecycleManager, Outcome

router = APIRouter(
    prefix="/jobs",
    tags=["jobs"],
    dependencies=[Depends(get_current_actor)],
)

# Job profiles are public pages.
public_router = APIRouter(prefix="/jobs", tags=["jobs"])

STATUS_CODES = {
    Outcome.SUCCESS: 200,
    Outcome.DENIED: 403,
    Outcome.NOT_FOUND: 404,
    Outcome.CONFLICT: 409,
}


def _action_response(request: Request, result: ActionResult, redirect_route: str | None) -> JSONResponse:
    redirect_to = str(request.app.url_path_for(redirect_route)) if redirect_route else None
    body = ActionResponse(
        outcome=result.outcome.value,
        message=result.message,
        redirect_to=redirect_to,
    )
    return JSONResponse(status_code=STATUS_CODES[result.outcome], content=body.model_dump())


@router.get("", response_model=JobListResponse, name="list_jobs")
async def list_jobs(
    status: JobStatus | None = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    actor: UserData = Depends(get_current_actor),
    manager: JobLifecycleManager = Depends(get_lifecycle_manager),
):
    jobs, total = manager.list_for(actor, status=status, page=page, per_page=per_page)
    return JobListResponse(jobs=jobs, total=total, page=page, per_page=per_page)


@router.post("", response_model=JobData, status_code=201)
async def create_job(
    req: JobPayload,
    actor: UserData = Depends(require_publishing_account),
    manager: JobLifecycleManager = Depends(get_lifecycle_manager),
):
    return manager.create(actor, req)


@router.get("/pending", response_model=JobListResponse, name="pending_jobs")
async def pending_jobs(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    _actor: UserData = Depends(require_elevated_role),
    manager: JobLifecycleManager = Depends(get_lifecycle_manager),
):
    jobs, total = manager.pending(page=page, per_page=per_page)
    return JobListResponse(jobs=jobs, total=total, page=page, per_page=per_page)


@public_router.get("/profile/{uuid}", response_model=JobData)
async def job_profile(uuid: str, manager: JobLifecycleManager = Depends(get_lifecycle_manager)):
    result = manager.profile(uuid)
    if not result.ok:
        raise HTTPException(status_code=404, detail=result.message)
    return result.job


@router.get("/editor/{uuid}", response_model=EditorResponse)
async def job_editor(
    uuid: str,
    actor: UserData = Depends(get_current_actor),
    manager: JobLifecycleManager = Depends(get_lifecycle_manager),
):
    result = manager.editor(actor, uuid)
    if not result.ok:
        raise HTTPException(status_code=404, detail=result.message)
    return EditorResponse(job=result.job, categories=result.categories)


@router.put("/editor/{uuid}", response_model=ActionResponse)
async def save_job(
    uuid: str,
    req: JobPayload,
    request: Request,
    actor: UserData = Depends(get_current_actor),
    manager: JobLifecycleManager = Depends(get_lifecycle_manager),
):
    result = manager.save(actor, uuid, req)
    return _action_response(request, result, "list_jobs" if result.ok else None)


@router.get("/{job_id}", response_model=JobDetail)
async def show_job(job_id: int, manager: JobLifecycleManager = Depends(get_lifecycle_manager)):
    result = manager.show(job_id)
    if not result.ok:
        raise HTTPException(status_code=404, detail=result.message)
    return result.job


@router.post("/{job_id}/activate", response_model=ActionResponse)
async def activate_job(
    job_id: int,
    request: Request,
    actor: UserData = Depends(get_current_actor),
    manager: JobLifecycleManager = Depends(get_lifecycle_manager),
):
    return _action_response(request, manager.activate(actor, job_id), "pending_jobs")


@router.post("/{job_id}/decline", response_model=ActionResponse)
async def decline_job(
    job_id: int,
    request: Request,
    req: DeclineRequest | None = None,
    actor: UserData = Depends(get_current_actor),
    manager: JobLifecycleManager = Depends(get_lifecycle_manager),
):
    reason = req.reason if req else None
    return _action_response(request, manager.decline(actor, job_id, reason), "pending_jobs")


@router.delete("/{job_id}", response_model=ActionResponse)
async def delete_job(
    job_id: int,
    request: Request,
    actor: UserData = Depends(get_current_actor),
    manager: JobLifecycleManager = Depends(get_lifecycle_manager),
):
    return _action_response(request, manager.delete(actor, job_id), "pending_jobs")
