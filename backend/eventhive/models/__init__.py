from eventhive.models.user import User
from eventhive.models.event import Event
from eventhive.models.ticket import Ticket
from eventhive.models.payment import PaymentOrder, Payment
from eventhive.models.booking import Booking
from eventhive.models.facility import Facility, Court
from eventhive.models.time_slot import TimeSlot, CourtBooking, WaitlistEntry
from eventhive.models.report import Report
from eventhive.models.review import FacilityReview

__all__ = [
    "User", "Event", "Ticket", "PaymentOrder", "Payment", "Booking",
    "Facility", "Court", "TimeSlot", "CourtBooking", "WaitlistEntry", "Report",
    "FacilityReview",
]
