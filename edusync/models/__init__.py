from .user import User, Role
from .course import Course
from .assessment import Assessment
from .enrollment import Enrollment
from .result import Result

__all__ = [
    "User", "Role",
    "Course",
    "Assessment",
    "Enrollment",
    "Result",
]
