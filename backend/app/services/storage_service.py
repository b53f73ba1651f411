import logging
from pathlib import Path

from PIL import Image, ImageOps

from app.config import settings
from app.utils.filesystem import ensure_storage_dirs, sanitize_filename
from app.utils.hashing import sha256_bytes

logger = logging.getLogger("app.storage")

THUMBNAIL_FOLDER = "thumbnails"
DEFAULT_BANNER_COLOR = (226, 232, 240)


class FileStorage:
    """Banner files stored below a storage root, addressed by relative link."""

    def __init__(self, root: Path | None = None):
        self.root = root or settings.storage_path

    def save(self, filename: str, content: bytes, folder: str = "banners") -> str:
        """Write content and return its link (path relative to the root)."""
        file_hash = sha256_bytes(content)
        stored_name = f"{file_hash[:12]}_{sanitize_filename(filename)}"

        ensure_storage_dirs(self.root)
        target_dir = self.root / folder
        target_dir.mkdir(parents=True, exist_ok=True)
        (target_dir / stored_name).write_bytes(content)

        return f"{folder}/{stored_name}"

    def resolve(self, link: str) -> Path:
        path = (self.root / link).resolve()
        if not path.is_relative_to(self.root.resolve()):
            raise ValueError(f"Link escapes storage root: {link}")
        return path

    def exists(self, link: str) -> bool:
        return self.resolve(link).is_file()

    def thumbnail(self, link: str, width: int, height: int) -> str:
        """Return the link of a copy cropped and scaled to width x height,
        rendering it on first request."""
        thumb_link = f"{THUMBNAIL_FOLDER}/{width}x{height}/{link}"
        if self.exists(thumb_link):
            return thumb_link

        target = self.resolve(thumb_link)
        target.parent.mkdir(parents=True, exist_ok=True)
        with Image.open(self.resolve(link)) as img:
            fitted = ImageOps.fit(img, (width, height))
            fitted.save(target, format=img.format or "PNG")
        logger.info("Rendered %s at %dx%d", link, width, height)
        return thumb_link

    def ensure_default_banner(self, width: int, height: int) -> str:
        link = settings.default_banner
        if not self.exists(link):
            target = self.resolve(link)
            target.parent.mkdir(parents=True, exist_ok=True)
            Image.new("RGB", (width, height), DEFAULT_BANNER_COLOR).save(target, format="PNG")
            logger.info("Created default banner %s", link)
        return link

    def delete(self, link: str) -> bool:
        path = self.resolve(link)
        for thumb in (self.root / THUMBNAIL_FOLDER).glob(f"*/{link}"):
            thumb.unlink()
        if not path.exists():
            return False
        path.unlink()
        logger.info("Deleted stored file %s", link)
        return True


def get_storage() -> FileStorage:
    return FileStorage(settings.storage_path)
