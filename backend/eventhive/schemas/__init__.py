from eventhive.schemas.user import UserCreate, UserResponse, UserLogin, Token
from eventhive.schemas.event import EventCreate, EventFilters, EventResponse, EventListResponse
from eventhive.schemas.ticket import TicketCreate, TicketResponse
from eventhive.schemas.payment import PaymentOrderCreate, PaymentOrderResponse, BookingResponse
from eventhive.schemas.facility import FacilityCreate, FacilityResponse, CourtCreate, CourtResponse
from eventhive.schemas.time_slot import TimeSlotCreate, TimeSlotGenerate, TimeSlotResponse
from eventhive.schemas.booking import CourtBookingResponse, PlayerBookingsResponse
from eventhive.schemas.report import ReportCreate, ReportResponse

__all__ = [
    "UserCreate", "UserResponse", "UserLogin", "Token",
    "EventCreate", "EventFilters", "EventResponse", "EventListResponse",
    "TicketCreate", "TicketResponse",
    "PaymentOrderCreate", "PaymentOrderResponse", "BookingResponse",
    "FacilityCreate", "FacilityResponse", "CourtCreate", "CourtResponse",
    "TimeSlotCreate", "TimeSlotGenerate", "TimeSlotResponse",
    "CourtBookingResponse", "PlayerBookingsResponse",
    "ReportCreate", "ReportResponse",
]
