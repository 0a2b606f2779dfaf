# cloka_events/crud/__init__.py

from .crud_event import event
from .crud_registration import registration
