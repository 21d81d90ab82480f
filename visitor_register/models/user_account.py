# visitor_register/models/user_account.py
"""
Staff and admin accounts. Independent from visitor records.
Passwords are stored as salted werkzeug hashes only.
"""

import enum
import uuid

from sqlalchemy import Column, DateTime, Enum, String
from visitor_register.database import Base


class UserRole(str, enum.Enum):
    admin = "admin"
    staff = "staff"


class UserAccount(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    username = Column(String(150), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(Enum(UserRole, native_enum=False, length=20), nullable=False, default=UserRole.staff)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)

    def __repr__(self):
        return f"<UserAccount {self.username} role={self.role.value if self.role else None}>"
