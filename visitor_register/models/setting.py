# visitor_register/models/setting.py
"""Key/value settings: disclosure texts, redirect URL, visitor PDF path."""

from sqlalchemy import Column, String, Text
from visitor_register.database import Base


class Setting(Base):
    __tablename__ = "settings"

    key = Column(String(100), primary_key=True)
    value = Column(Text, nullable=False, default="")

    def __repr__(self):
        return f"<Setting {self.key}>"
