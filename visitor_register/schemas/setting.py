from pydantic import AliasChoices, BaseModel, Field
from typing import Optional


class SettingsUpdate(BaseModel):
    # Older kiosk clients still send kvkk_text / aydinlatma_text
    privacy_notice_text: str = Field(validation_alias=AliasChoices("privacy_notice_text", "kvkk_text"))
    disclosure_text: str = Field(validation_alias=AliasChoices("disclosure_text", "aydinlatma_text"))
    redirect_url: Optional[str] = None


class MessageOut(BaseModel):
    message: str


class UploadOut(BaseModel):
    message: str
    path: str
