from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    storage_path: Path = Path.home() / "JobBoard"
    token_ttl_seconds: int = 3600  # 1 hour
    # Cap banner uploads so a single image cannot fill the storage volume.
    max_upload_bytes: int = 5 * 1024 * 1024  # 5 MiB
    media_url: str = "/media"
    default_banner: str = "banners/default.png"
    banner_width: int = 318
    banner_height: int = 180

    mail_backend: str = "smtp"  # "smtp" or "memory"
    smtp_host: str = "localhost"
    smtp_port: int = 25
    smtp_username: str | None = None
    smtp_password: str | None = None
    smtp_use_tls: bool = False
    mail_from: str = "no-reply@jobboard.local"

    cors_origins: list[str] = [
        "http://127.0.0.1:5173",
        "http://localhost:5173",
    ]
    api_prefix: str = "/api/v1"
    host: str = "127.0.0.1"
    port: int = 8000

    @property
    def db_path(self) -> Path:
        return self.storage_path / "db.sqlite"

    model_config = {"env_prefix": "JOBBOARD_"}


settings = Settings()
