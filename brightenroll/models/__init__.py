from .user import User, UserStatus, UserStatusLog
from .student import Guardian, Student, StudentRequirement, StudentStatus
from .employee import EmployeeAddress, EmployeeEmergencyContact, SalaryInfo
from .finance import GradeLevel, Fee, FeeBreakdown

__all__ = [
    "User",
    "UserStatus",
    "UserStatusLog",
    "Guardian",
    "Student",
    "StudentRequirement",
    "StudentStatus",
    "EmployeeAddress",
    "EmployeeEmergencyContact",
    "SalaryInfo",
    "GradeLevel",
    "Fee",
    "FeeBreakdown",
]
