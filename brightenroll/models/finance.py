from sqlalchemy import Column, Integer, String, Boolean, DateTime, Numeric, ForeignKey, Computed
from sqlalchemy.orm import relationship
from datetime import datetime

from brightenroll.core.database import Base


class GradeLevel(Base):
    __tablename__ = "tbl_GradeLevel"

    grade_level_id = Column("gradelevel_ID", Integer, primary_key=True, autoincrement=True)
    grade_level_name = Column(String(50), nullable=False)
    is_active = Column(Boolean, default=True)

    # Relationships
    fees = relationship("Fee", back_populates="grade_level")


class Fee(Base):
    """Tuition schedule for one grade level."""

    __tablename__ = "tbl_Fees"

    fee_id = Column("fee_ID", Integer, primary_key=True, autoincrement=True)
    grade_level_id = Column("gradelevel_ID", Integer, ForeignKey("tbl_GradeLevel.gradelevel_ID"), nullable=False)
    tuition_fee = Column(Numeric(18, 2), nullable=False, default=0)
    misc_fee = Column(Numeric(18, 2), nullable=False, default=0)
    other_fee = Column(Numeric(18, 2), nullable=False, default=0)
    # Maintained by the database, never written directly
    total_fee = Column(Numeric(18, 2), Computed("tuition_fee + misc_fee + other_fee"))
    created_date = Column(DateTime, nullable=False, default=datetime.now)
    updated_date = Column(DateTime, nullable=True)
    created_by = Column(String(50), nullable=True)
    updated_by = Column(String(50), nullable=True)
    is_active = Column(Boolean, default=True)

    # Relationships
    grade_level = relationship("GradeLevel", back_populates="fees")
    breakdowns = relationship("FeeBreakdown", back_populates="fee")


class FeeBreakdown(Base):
    __tablename__ = "tbl_FeeBreakdown"

    breakdown_id = Column("breakdown_ID", Integer, primary_key=True, autoincrement=True)
    fee_id = Column("fee_ID", Integer, ForeignKey("tbl_Fees.fee_ID"), nullable=False)
    breakdown_type = Column(String(20), nullable=False)
    item_name = Column(String(200), nullable=False)
    amount = Column(Numeric(18, 2), nullable=False, default=0)
    display_order = Column(Integer, default=0)
    created_date = Column(DateTime, nullable=False, default=datetime.now)
    updated_date = Column(DateTime, nullable=True)

    # Relationships
    fee = relationship("Fee", back_populates="breakdowns")
