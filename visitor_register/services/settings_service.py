# visitor_register/services/settings_service.py
"""
Key/value settings shown on the kiosk: disclosure texts, the URL to send
visitors to after check-in, and the path of the downloadable visitor PDF.

Uploaded PDFs are written to UPLOAD_DIR under a generated name and served
from /uploads by the app. Only the current PDF is kept on disk.
"""

import os
import uuid

from fastapi import UploadFile
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from visitor_register.exceptions import InternalError, ValidationError
from visitor_register.models.setting import Setting
from visitor_register.schemas.setting import SettingsUpdate
from visitor_register.utils.logger import get_logger

logger = get_logger(__name__)

UPLOADS_URL_PREFIX = "/uploads"
PDF_MAGIC = b"%PDF"

DEFAULT_SETTINGS = {
    "privacy_notice_text": "This is the default privacy notice. Please update it from the admin panel.",
    "disclosure_text": "This is the default disclosure text. Please update it from the admin panel.",
    "redirect_url": "",
    "visitor_pdf_path": "",
}


def seed_default_settings(db: Session) -> None:
    """Insert any missing default keys. Existing values are left alone."""
    existing = {key for (key,) in db.query(Setting.key).all()}
    missing = [Setting(key=k, value=v) for k, v in DEFAULT_SETTINGS.items() if k not in existing]
    if missing:
        db.add_all(missing)
        db.commit()
        logger.info(f"[SETTINGS] Seeded defaults: {[s.key for s in missing]}")


def get_all_settings(db: Session) -> dict[str, str]:
    return {row.key: row.value for row in db.query(Setting).all()}


def set_values(db: Session, values: dict[str, str]) -> None:
    """Upsert several keys in one transaction."""
    for key, value in values.items():
        row = db.query(Setting).filter(Setting.key == key).first()
        if row is None:
            db.add(Setting(key=key, value=value))
        else:
            row.value = value
    db.commit()


def update_settings(db: Session, data: SettingsUpdate) -> None:
    values = {
        "privacy_notice_text": data.privacy_notice_text,
        "disclosure_text": data.disclosure_text,
    }
    if data.redirect_url is not None:
        values["redirect_url"] = data.redirect_url.strip()
    set_values(db, values)
    logger.info(f"[SETTINGS] Updated {sorted(values)}")


async def save_visitor_pdf(db: Session, upload: UploadFile, upload_dir: str, max_bytes: int) -> str:
    """
    Validate and store an uploaded PDF, then point visitor_pdf_path at it.
    Returns the public URL path of the stored file.
    """
    filename = upload.filename or ""
    if not filename.lower().endswith(".pdf"):
        raise ValidationError("Only PDF files can be uploaded.", errors=[{"field": "pdf", "message": "File must have a .pdf extension."}])

    content = await upload.read(max_bytes + 1)
    if len(content) > max_bytes:
        raise ValidationError("Uploaded file is too large.", errors=[{"field": "pdf", "message": f"File must be at most {max_bytes} bytes."}])
    if not content.startswith(PDF_MAGIC):
        raise ValidationError("Only PDF files can be uploaded.", errors=[{"field": "pdf", "message": "File content is not a PDF."}])

    return await run_in_threadpool(_store_visitor_pdf, db, content, upload_dir)


def _remove_previous_pdf(previous_path: str, upload_dir: str) -> None:
    if not previous_path.startswith(f"{UPLOADS_URL_PREFIX}/"):
        return
    old_file = os.path.join(upload_dir, os.path.basename(previous_path))
    if not os.path.isfile(old_file):
        return
    try:
        os.remove(old_file)
    except OSError as e:
        logger.warning(f"[UPLOAD] Could not remove replaced PDF {old_file}: {e}")
        return
    logger.info(f"[UPLOAD] Removed replaced PDF {os.path.basename(old_file)}")


def _store_visitor_pdf(db: Session, content: bytes, upload_dir: str) -> str:
    """Blocking half of the upload. Replaces any previously uploaded PDF."""
    stored_name = f"visitor_{uuid.uuid4().hex}.pdf"
    filepath = os.path.join(upload_dir, stored_name)
    try:
        os.makedirs(upload_dir, exist_ok=True)
        with open(filepath, "wb") as f:
            f.write(content)
    except OSError as e:
        logger.error(f"[UPLOAD] Could not write {filepath}: {e}")
        raise InternalError("Could not store uploaded file.")

    previous_path = get_all_settings(db).get("visitor_pdf_path", "")
    public_path = f"{UPLOADS_URL_PREFIX}/{stored_name}"
    set_values(db, {"visitor_pdf_path": public_path})
    logger.info(f"[UPLOAD] Saved visitor PDF {stored_name} ({len(content)} bytes)")

    if previous_path and previous_path != public_path:
        _remove_previous_pdf(previous_path, upload_dir)
    return public_path
