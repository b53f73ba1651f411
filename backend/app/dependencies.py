from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.entities import UserData
from app.services.auth_service import auth_service
from app.services.job_lifecycle import JobLifecycleManager
from app.services.job_store import SqlJobStore
from app.services.notification_service import Notifier, get_notifier
from app.services.storage_service import FileStorage, get_storage


async def require_token(authorization: str = Header(...)) -> str:
    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing bearer token")
    return authorization[7:]


def get_current_actor(token: str = Depends(require_token), db: Session = Depends(get_db)) -> UserData:
    user_id = auth_service.user_id_for(token)
    if user_id is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    actor = SqlJobStore(db).get_user(user_id)
    if actor is None:
        raise HTTPException(status_code=401, detail="Account no longer exists")
    return actor


def require_elevated_role(actor: UserData = Depends(get_current_actor)) -> UserData:
    if not actor.is_elevated:
        raise HTTPException(status_code=403, detail="Permission denied!")
    return actor


def get_lifecycle_manager(
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    storage: FileStorage = Depends(get_storage),
) -> JobLifecycleManager:
    return JobLifecycleManager(SqlJobStore(db), notifier, storage)


def require_publishing_account(
    actor: UserData = Depends(get_current_actor),
    manager: JobLifecycleManager = Depends(get_lifecycle_manager),
) -> UserData:
    # Resolved before the request body, so account problems win over field errors.
    manager.check_can_create(actor)
    return actor
