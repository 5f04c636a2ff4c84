from officehub.models.attendance import Attendance
from officehub.models.audit import ActivityLog
from officehub.models.expense import Expense
from officehub.models.leave import Leave
from officehub.models.organization import Organization
from officehub.models.session import UserSession
from officehub.models.summary import MonthlySummary
from officehub.models.task import Task
from officehub.models.user import User

__all__ = [
    "ActivityLog",
    "Attendance",
    "Expense",
    "Leave",
    "MonthlySummary",
    "Organization",
    "Task",
    "User",
    "UserSession",
]
