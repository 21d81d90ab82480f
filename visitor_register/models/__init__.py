# Visitor Register: Database Models
# Import all models here for SQLAlchemy discovery

from visitor_register.models.visitor import Visitor            # noqa
from visitor_register.models.user_account import UserAccount, UserRole  # noqa
from visitor_register.models.setting import Setting            # noqa
