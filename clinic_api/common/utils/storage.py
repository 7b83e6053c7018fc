# clinic_api/common/utils/storage.py

import re
import time
from pathlib import Path

from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool

from clinic_api.common.config import settings

PDF_CONTENT_TYPE = "application/pdf"
PDF_MAGIC = b"%PDF"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def upload_root() -> Path:
    return Path(settings.UPLOAD_DIR)


def safe_filename(filename: str) -> str:
    """Strip directories and unsafe characters from a client-supplied name."""
    name = Path(filename or "upload").name
    name = _UNSAFE_CHARS.sub("_", name).strip("._")
    return name or "upload"


def looks_like_pdf(file: UploadFile, head: bytes) -> bool:
    """Declared MIME type and leading bytes must both say PDF."""
    return file.content_type == PDF_CONTENT_TYPE and head.startswith(PDF_MAGIC)


async def save_upload(file: UploadFile, subdir: str, content: bytes) -> str:
    """
    Write an uploaded file under UPLOAD_DIR/<subdir>/ and return its public path.

    Stored names are prefixed with the epoch milliseconds so that repeated
    uploads of the same file never overwrite each other.
    """
    target_dir = upload_root() / subdir
    target_dir.mkdir(parents=True, exist_ok=True)

    stored_name = f"{int(time.time() * 1000)}-{safe_filename(file.filename)}"
    await run_in_threadpool((target_dir / stored_name).write_bytes, content)

    return f"/uploads/{subdir}/{stored_name}"


def discard_upload(public_path: str) -> None:
    """Remove a file previously returned by save_upload, if it still exists."""
    relative = public_path.removeprefix("/uploads/")
    (upload_root() / relative).unlink(missing_ok=True)
