from sqlalchemy import Column, Integer, SmallInteger, String, Boolean, Date, DateTime, Text, ForeignKey
from datetime import datetime
import enum

from brightenroll.core.database import Base


class UserStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class User(Base):
    __tablename__ = "tbl_Users"

    user_id = Column("user_ID", Integer, primary_key=True, autoincrement=True)
    system_id = Column("system_ID", String(50), nullable=False)
    first_name = Column(String(50), nullable=False)
    mid_name = Column(String(50), nullable=True)
    last_name = Column(String(50), nullable=False)
    suffix = Column(String(10), nullable=True)
    birthdate = Column(Date, nullable=False)
    age = Column(SmallInteger, nullable=False)
    gender = Column(String(20), nullable=False)
    contact_num = Column(String(20), nullable=False)
    user_role = Column(String(50), nullable=False)
    email = Column(String(150), nullable=False)
    password = Column(String(255), nullable=False)
    date_hired = Column(DateTime, nullable=False)
    status = Column(String(20), nullable=False, default=UserStatus.ACTIVE.value)
    is_synced = Column(Boolean, nullable=False, default=False)


class UserStatusLog(Base):
    """Audit trail of user status transitions (active <-> inactive)."""

    __tablename__ = "tbl_user_status_logs"

    log_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("tbl_Users.user_ID"), nullable=False)
    changed_by = Column(Integer, ForeignKey("tbl_Users.user_ID"), nullable=False)
    old_status = Column(String(20), nullable=False)
    new_status = Column(String(20), nullable=False)
    reason = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    is_synced = Column(Boolean, nullable=False, default=False)
