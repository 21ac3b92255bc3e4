from enum import Enum


class UserRole(str, Enum):
    PLAYER = "PLAYER"
    FACILITY_OWNER = "FACILITY_OWNER"
    ADMIN = "ADMIN"


class EventStatus(str, Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class EventCategory(str, Enum):
    MUSIC = "MUSIC"
    SPORTS = "SPORTS"
    TECHNOLOGY = "TECHNOLOGY"
    BUSINESS = "BUSINESS"
    ARTS = "ARTS"
    FOOD = "FOOD"
    EDUCATION = "EDUCATION"
    HEALTH = "HEALTH"
    OTHER = "OTHER"


class TicketType(str, Enum):
    GENERAL = "GENERAL"
    VIP = "VIP"
    EARLY_BIRD = "EARLY_BIRD"
    STUDENT = "STUDENT"
    GROUP = "GROUP"


class PaymentOrderStatus(str, Enum):
    PENDING = "PENDING"
    SUCCESSFUL = "SUCCESSFUL"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


TERMINAL_ORDER_STATUSES = frozenset(
    {PaymentOrderStatus.SUCCESSFUL, PaymentOrderStatus.FAILED, PaymentOrderStatus.CANCELLED}
)


class PaymentStatus(str, Enum):
    SUCCESSFUL = "SUCCESSFUL"
    FAILED = "FAILED"


class BookingStatus(str, Enum):
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class FacilityStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class VenueType(str, Enum):
    INDOOR = "INDOOR"
    OUTDOOR = "OUTDOOR"
    MIXED = "MIXED"


class SportType(str, Enum):
    BADMINTON = "BADMINTON"
    TENNIS = "TENNIS"
    FOOTBALL = "FOOTBALL"
    CRICKET = "CRICKET"
    BASKETBALL = "BASKETBALL"
    TABLE_TENNIS = "TABLE_TENNIS"
    VOLLEYBALL = "VOLLEYBALL"
    SQUASH = "SQUASH"
    OTHER = "OTHER"


class SlotStatus(str, Enum):
    """Derived from a slot's maintenance flag and bookings; never stored."""

    AVAILABLE = "AVAILABLE"
    BOOKED = "BOOKED"
    MAINTENANCE = "MAINTENANCE"


class ReportType(str, Enum):
    INAPPROPRIATE_BEHAVIOR = "INAPPROPRIATE_BEHAVIOR"
    FACILITY_ISSUE = "FACILITY_ISSUE"
    FRAUD = "FRAUD"
    SPAM = "SPAM"
    OTHER = "OTHER"


class ReportStatus(str, Enum):
    PENDING = "PENDING"
    UNDER_REVIEW = "UNDER_REVIEW"
    RESOLVED = "RESOLVED"
    DISMISSED = "DISMISSED"


def sql_in(enum_cls) -> str:
    """Render enum values for a CHECK ... IN (...) constraint."""
    return ", ".join(f"'{member.value}'" for member in enum_cls)
