from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from brightenroll.core.database import Base


class StudentStatus(str, enum.Enum):
    PENDING = "Pending"
    ENROLLED = "Enrolled"
    INACTIVE = "Inactive"


class Guardian(Base):
    __tablename__ = "tbl_Guardians"

    guardian_id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(50), nullable=False)
    middle_name = Column(String(50), nullable=True)
    last_name = Column(String(50), nullable=False)
    suffix = Column(String(10), nullable=True)
    contact_num = Column(String(20), nullable=True)
    relation_to_student = Column("relationship", String(50), nullable=True)

    # Relationships
    students = relationship("Student", back_populates="guardian")


class Student(Base):
    """Registered learner. Keyed by the school-issued string identifier."""

    __tablename__ = "tbl_Students"

    student_id = Column(String(20), primary_key=True)
    first_name = Column(String(50), nullable=False)
    middle_name = Column(String(50), nullable=True)
    last_name = Column(String(50), nullable=False)
    suffix = Column(String(10), nullable=True)
    birthdate = Column(Date, nullable=False)
    age = Column(Integer, nullable=False)
    place_of_birth = Column(String(100), nullable=True)
    sex = Column(String(10), nullable=False)
    mother_tongue = Column(String(50), nullable=True)
    ip_comm = Column(Boolean, nullable=False, default=False)
    ip_specify = Column(String(50), nullable=True)
    four_ps = Column(Boolean, nullable=False, default=False)
    four_ps_hse_id = Column("four_ps_hseID", String(50), nullable=True)

    # Current address
    hse_no = Column(String(20), nullable=True)
    street = Column(String(100), nullable=True)
    brngy = Column(String(50), nullable=True)
    province = Column(String(50), nullable=True)
    city = Column(String(50), nullable=True)
    country = Column(String(50), nullable=True)
    zip_code = Column(String(10), nullable=True)

    # Permanent address
    phse_no = Column(String(20), nullable=True)
    pstreet = Column(String(100), nullable=True)
    pbrngy = Column(String(50), nullable=True)
    pprovince = Column(String(50), nullable=True)
    pcity = Column(String(50), nullable=True)
    pcountry = Column(String(50), nullable=True)
    pzip_code = Column(String(10), nullable=True)

    student_type = Column(String(20), nullable=False)
    lrn = Column("LRN", String(20), nullable=True)
    school_yr = Column(String(20), nullable=True)
    grade_level = Column(String(10), nullable=True)
    guardian_id = Column(Integer, ForeignKey("tbl_Guardians.guardian_id"), nullable=False)
    date_registered = Column(DateTime, nullable=False, default=datetime.now)
    status = Column(String(20), nullable=False, default=StudentStatus.PENDING.value)
    archive_reason = Column(Text, nullable=True)

    # Relationships
    guardian = relationship("Guardian", back_populates="students")
    requirements = relationship("StudentRequirement", back_populates="student")


class StudentRequirement(Base):
    __tablename__ = "tbl_StudentRequirements"

    requirement_id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(String(20), ForeignKey("tbl_Students.student_id"), nullable=False)
    requirement_name = Column(String(100), nullable=False)
    status = Column(String(20), default="not submitted")
    requirement_type = Column(String(20), nullable=False)

    # Relationships
    student = relationship("Student", back_populates="requirements")
