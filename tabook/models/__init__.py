from tabook.models.user import User
from tabook.models.student_profile import StudentProfile
from tabook.models.booking import Booking

__all__ = [
    "User",
    "StudentProfile",
    "Booking",
]
