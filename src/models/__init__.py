from src.models.user_db import User, SessionSlot
from src.models.patient_db import Patient
from src.models.visit_db import Visit
from src.models.appointments_db import Appointment

__all__ = ["User", "SessionSlot", "Patient", "Visit", "Appointment"]
