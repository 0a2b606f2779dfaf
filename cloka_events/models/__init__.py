from .event import Event
from .registration import Registration
