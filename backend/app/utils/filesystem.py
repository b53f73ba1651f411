from pathlib import Path
from app.config import settings


def ensure_storage_dirs(storage_path: Path | None = None) -> Path:
    path = storage_path or settings.storage_path
    path.mkdir(parents=True, exist_ok=True)
    (path / "banners").mkdir(exist_ok=True)
    return path


def sanitize_filename(name: str) -> str:
    keep = set("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789._-")
    return "".join(c if c in keep else "_" for c in name)
