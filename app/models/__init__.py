# app/models/__init__.py
from .base import Base
from .user import User, UserRole
from .restaurant import Restaurant, DateAvailability, TableDefinition
from .booking import Booking, BookingStatus
from .notification import Notification, NotificationType
from .review import Review
from .consistency_fault import ConsistencyFault, ConsistencyFaultKind

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Restaurant",
    "DateAvailability",
    "TableDefinition",
    "Booking",
    "BookingStatus",
    "Notification",
    "NotificationType",
    "Review",
    "ConsistencyFault",
    "ConsistencyFaultKind",
]
