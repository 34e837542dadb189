import os
import re
import secrets
import time
from typing import Optional

from fastapi import UploadFile

from site_erp.core.config import settings
from site_erp.logger_config import logger

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def safe_filename(original: Optional[str]) -> str:
    name = _UNSAFE_CHARS.sub("_", os.path.basename(original or "")).strip("._")
    return name or "upload"


class LocalFileStorage:
    """Stores uploaded files under UPLOAD_DIR and serves them from UPLOAD_URL_PREFIX."""

    def __init__(self, base_dir: Optional[str] = None, url_prefix: Optional[str] = None):
        self.base_dir = base_dir or settings.UPLOAD_DIR
        self.url_prefix = (url_prefix or settings.UPLOAD_URL_PREFIX).rstrip("/")

    def save(self, file: UploadFile, folder: str) -> str:
        """Write the upload to disk and return its public URL."""
        target_dir = os.path.join(self.base_dir, folder)
        os.makedirs(target_dir, exist_ok=True)

        filename = f"{int(time.time() * 1000)}-{secrets.token_hex(4)}-{safe_filename(file.filename)}"
        path = os.path.join(target_dir, filename)

        file.file.seek(0)
        with open(path, "wb") as out:
            while chunk := file.file.read(1024 * 1024):
                out.write(chunk)

        logger.debug(f"Stored upload {file.filename} at {path}")
        return f"{self.url_prefix}/{folder}/{filename}"

    def delete(self, url: Optional[str]) -> None:
        """Best-effort removal of a previously stored file."""
        if not url or not url.startswith(self.url_prefix + "/"):
            return
        path = os.path.join(self.base_dir, url[len(self.url_prefix) + 1:])
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError:
            logger.warning(f"Could not remove stored upload {path}")


def get_file_storage() -> LocalFileStorage:
    return LocalFileStorage()
