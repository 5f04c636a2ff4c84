from __future__ import annotations

import enum


class Role(str, enum.Enum):
    ADMIN = "admin"
    PROPRIETOR = "proprietor"
    STAFF = "staff"


class TaskStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    REASSIGNED = "reassigned"


class TaskPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AttendanceStatus(str, enum.Enum):
    PRESENT = "present"
    ABSENT = "absent"
    HALF_DAY = "half_day"
    LEAVE = "leave"


class LeaveType(str, enum.Enum):
    SICK = "sick"
    CASUAL = "casual"
    VACATION = "vacation"
    EMERGENCY = "emergency"
    OTHER = "other"


class ApprovalStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
