"""SQLAlchemy ORM models for Time Report.

All models are exported from this module for convenient imports:
    from timereport.models import User, OtpCode, Session, ...

Models are split by store:
- Central store (Base): User, OtpCode, Session
- Per-user store (UserStoreBase): Project, TimeEntry
"""

from timereport.models.base import Base, TimestampMixin, UserStoreBase, UTCDateTime
from timereport.models.otp_code import OtpCode
from timereport.models.project import Project
from timereport.models.session import Session
from timereport.models.time_entry import TimeEntry
from timereport.models.user import User

__all__ = [
    # Base classes
    "Base",
    "UserStoreBase",
    "TimestampMixin",
    "UTCDateTime",
    # Central store
    "User",
    "OtpCode",
    "Session",
    # Per-user store
    "Project",
    "TimeEntry",
]
