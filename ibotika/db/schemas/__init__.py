from .appointment_schemas import *
