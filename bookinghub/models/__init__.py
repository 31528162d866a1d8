# Import all models here for easier imports elsewhere
from .user import User
from .business import Business
from .service import Service
from .staff import Staff
from .availability import Availability
from .customer import Customer
from .appointment import Appointment
from .audit import AuditLog
