# visitor_register/routers/settings.py
"""Kiosk settings: public read, admin write, admin PDF upload."""

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from visitor_register.config import Settings
from visitor_register.dependencies import get_db, get_settings, require_admin
from visitor_register.schemas.setting import MessageOut, SettingsUpdate, UploadOut
from visitor_register.services import settings_service

router = APIRouter()


@router.get("/settings", response_model=dict[str, str], summary="All kiosk settings as key/value")
def read_settings(db: Session = Depends(get_db)):
    return settings_service.get_all_settings(db)


@router.put("/settings", response_model=MessageOut, summary="Update disclosure texts and redirect URL")
def update_settings(body: SettingsUpdate, db: Session = Depends(get_db), _=Depends(require_admin)):
    settings_service.update_settings(db, body)
    return {"message": "Settings updated successfully."}


@router.post("/upload/pdf", response_model=UploadOut, summary="Upload the downloadable visitor PDF")
async def upload_pdf(
    pdf: UploadFile = File(...),
    db: Session = Depends(get_db),
    app_settings: Settings = Depends(get_settings),
    _=Depends(require_admin),
):
    path = await settings_service.save_visitor_pdf(db, pdf, app_settings.UPLOAD_DIR, app_settings.MAX_UPLOAD_BYTES)
    return {"message": "PDF uploaded successfully.", "path": path}
