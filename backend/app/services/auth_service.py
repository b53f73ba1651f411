import logging
import time
from datetime import datetime, timezone

from sqlalchemy import text
from sqlalchemy.orm import Session

from app.config import settings
from app.models.user import User
from app.schemas.entities import UserData
from app.services.job_store import user_to_data
from app.services.notification_service import Notifier
from app.utils.security import generate_token, hash_password, verify_password

logger = logging.getLogger("app.auth")


class AuthService:
    def __init__(self):
        self._active_tokens: dict[str, tuple[int, float]] = {}  # token -> (user_id, expires_at)

    def _cleanup_expired(self):
        now = time.time()
        self._active_tokens = {
            t: entry for t, entry in self._active_tokens.items() if entry[1] > now
        }

    def register(self, db: Session, notifier: Notifier, email: str, name: str, password: str) -> UserData | None:
        """Create an unverified account and mail its confirmation code.
        Returns None when the email is already taken."""
        email = email.strip().lower()
        if db.query(User).filter(User.email == email).first():
            return None

        now = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        verification_token = generate_token()
        user = User(
            email=email,
            name=name.strip(),
            password_hash=hash_password(password),
            verified=False,
            verification_token=verification_token,
            created_at=now,
            updated_at=now,
        )
        db.add(user)
        db.commit()
        db.refresh(user)

        data = user_to_data(user)
        notifier.send("verify_email", data, token=verification_token)
        return data

    def verify_email(self, db: Session, token: str) -> UserData | None:
        user = db.query(User).filter(User.verification_token == token).first()
        if not user:
            return None
        user.verified = True
        user.verification_token = None
        user.updated_at = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        db.commit()
        db.refresh(user)
        return user_to_data(user)

    def login(self, db: Session, email: str, password: str, throttle_key: str = "login") -> dict | None:
        delay = self._get_throttle_delay(db, throttle_key)
        if delay > 0:
            return {"error": "too_many_attempts", "retry_after_seconds": delay}

        user = db.query(User).filter(User.email == email.strip().lower()).first()
        if not user or not verify_password(user.password_hash, password):
            self._record_failed_attempt(db, throttle_key)
            logger.warning("Failed login for %s", email)
            return None

        self._reset_failed_attempts(db, throttle_key)
        token = generate_token()
        self._active_tokens[token] = (user.id, time.time() + settings.token_ttl_seconds)
        return {"token": token, "expires_in_seconds": settings.token_ttl_seconds}

    def logout(self, token: str):
        self._active_tokens.pop(token, None)

    def user_id_for(self, token: str) -> int | None:
        self._cleanup_expired()
        entry = self._active_tokens.get(token)
        return entry[0] if entry else None

    def set_payment_account(self, db: Session, user_id: int, paypal_email: str | None) -> UserData:
        user = db.query(User).filter(User.id == user_id).one()
        user.paypal_email = paypal_email.strip() if paypal_email else None
        user.updated_at = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        db.commit()
        db.refresh(user)
        return user_to_data(user)

    def _get_throttle_delay(self, db: Session, key: str) -> float:
        row = db.execute(
            text("SELECT failed_attempts, last_failed_at FROM auth_throttle WHERE key = :key"),
            {"key": key},
        ).fetchone()
        if not row:
            return 0
        failed_attempts = int(row[0])
        last_failed_at = float(row[1])

        if failed_attempts < 3:
            return 0
        if failed_attempts < 5:
            delay = 5.0
        elif failed_attempts < 10:
            delay = 30.0
        else:
            delay = 300.0
        elapsed = time.time() - last_failed_at
        remaining = delay - elapsed
        return max(0, remaining)

    def _record_failed_attempt(self, db: Session, key: str):
        now = time.time()
        db.execute(
            text(
                """
                INSERT INTO auth_throttle (key, failed_attempts, last_failed_at)
                VALUES (:key, 1, :now)
                ON CONFLICT(key) DO UPDATE SET
                    failed_attempts = failed_attempts + 1,
                    last_failed_at = :now
                """
            ),
            {"key": key, "now": now},
        )
        db.commit()

    def _reset_failed_attempts(self, db: Session, key: str):
        db.execute(
            text(
                """
                INSERT INTO auth_throttle (key, failed_attempts, last_failed_at)
                VALUES (:key, 0, :now)
                ON CONFLICT(key) DO UPDATE SET
                    failed_attempts = 0,
                    last_failed_at = :now
                """
            ),
            {"key": key, "now": time.time()},
        )
        db.commit()


auth_service = AuthService()
