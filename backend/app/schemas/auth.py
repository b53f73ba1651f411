from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    email: str = Field(min_length=3)
    name: str = Field(min_length=1)
    password: str


class VerifyRequest(BaseModel):
    token: str


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    token: str
    expires_in_seconds: int


class ThrottleResponse(BaseModel):
    error: str
    retry_after_seconds: float


class PaymentAccountUpdate(BaseModel):
    paypal_email: str | None = None


class UserResponse(BaseModel):
    id: int
    email: str
    name: str
    verified: bool
    has_payment_account: bool
    roles: list[str] = []
