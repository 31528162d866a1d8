from .customers import CustomerInput, CustomerResolver
from .slots import Slot, SlotValidator
from .catalog import public_catalog, remove_service, remove_staff
from .engine import (
    AppointmentInput, BookingEngine, SOURCE_PUBLIC, SOURCE_STAFF, booking_engine
)
