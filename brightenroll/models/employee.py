from sqlalchemy import Column, Integer, String, Boolean, Date, Numeric, ForeignKey
from datetime import date

from brightenroll.core.database import Base


class EmployeeAddress(Base):
    __tablename__ = "tbl_employee_address"

    address_id = Column("address_ID", Integer, primary_key=True, autoincrement=True)
    user_id = Column("user_ID", Integer, ForeignKey("tbl_Users.user_ID"), nullable=False)
    house_no = Column(String(50), nullable=True)
    street_name = Column(String(150), nullable=True)
    province = Column(String(100), nullable=True)
    city = Column(String(100), nullable=True)
    barangay = Column(String(150), nullable=True)
    country = Column(String(100), nullable=True)
    zip_code = Column(String(10), nullable=True)


class EmployeeEmergencyContact(Base):
    __tablename__ = "tbl_employee_emergency_contact"

    emergency_id = Column("emergency_ID", Integer, primary_key=True, autoincrement=True)
    user_id = Column("user_ID", Integer, ForeignKey("tbl_Users.user_ID"), nullable=False)
    first_name = Column(String(50), nullable=False)
    middle_name = Column("mid_name", String(50), nullable=True)
    last_name = Column(String(50), nullable=False)
    suffix = Column(String(10), nullable=True)
    relationship = Column(String(50), nullable=True)
    contact_number = Column(String(20), nullable=True)
    address = Column(String(255), nullable=True)


class SalaryInfo(Base):
    __tablename__ = "tbl_salary_info"

    salary_id = Column("salary_ID", Integer, primary_key=True, autoincrement=True)
    user_id = Column("user_ID", Integer, ForeignKey("tbl_Users.user_ID"), nullable=False)
    base_salary = Column(Numeric(12, 2), nullable=False)
    allowance = Column(Numeric(12, 2), default=0)
    date_effective = Column(Date, default=date.today)
    is_active = Column(Boolean, default=True)
