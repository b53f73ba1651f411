from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_actor, require_token
from app.schemas.auth import (
    LoginRequest,
    LoginResponse,
    PaymentAccountUpdate,
    RegisterRequest,
    ThrottleResponse,
    UserResponse,
    VerifyRequest,
)
from app.schemas.entities import UserData
from app.services.auth_service import auth_service
from app.services.notification_service import Notifier, get_notifier

router = APIRouter(prefix="/auth", tags=["auth"])


def _user_to_response(user: UserData) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        verified=user.verified,
        has_payment_account=user.has_payment_account,
        roles=user.roles,
    )


@router.post("/register", response_model=UserResponse, status_code=201)
async def register(
    req: RegisterRequest,
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    if len(req.password) < 8:
        raise HTTPException(status_code=400, detail="Password must be at least 8 characters")
    user = auth_service.register(db, notifier, req.email, req.name, req.password)
    if user is None:
        raise HTTPException(status_code=409, detail="Email already registered")
    return _user_to_response(user)


@router.post("/verify", response_model=UserResponse)
async def verify_email(req: VerifyRequest, db: Session = Depends(get_db)):
    user = auth_service.verify_email(db, req.token)
    if user is None:
        raise HTTPException(status_code=400, detail="Invalid verification token")
    return _user_to_response(user)


@router.post("/login", response_model=LoginResponse | ThrottleResponse)
async def login(req: LoginRequest, request: Request, db: Session = Depends(get_db)):
    client_host = request.client.host if request.client else "unknown"
    result = auth_service.login(db, req.email, req.password, throttle_key=f"login:{client_host}")
    if result is None:
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if "error" in result:
        raise HTTPException(status_code=429, detail=result)
    return LoginResponse(**result)


@router.post("/logout")
async def logout(token: str = Depends(require_token)):
    auth_service.logout(token)
    return {"message": "Logged out"}


@router.get("/me", response_model=UserResponse)
async def me(actor: UserData = Depends(get_current_actor)):
    return _user_to_response(actor)


@router.put("/me/payment", response_model=UserResponse)
async def set_payment_account(
    req: PaymentAccountUpdate,
    actor: UserData = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    user = auth_service.set_payment_account(db, actor.id, req.paypal_email)
    return _user_to_response(user)
