"""
Assignflow Package
==================

Single-producer / single-consumer exchange of prioritized assignments
through a shared, thread-safe priority queue with explicit completion
signalling.
"""

from .channel import SharedChannel
from .consumer import Consumer
from .coordinator import Coordinator
from .errors import AssignflowError, ItemsFileError, ProductionError, ProtocolError
from .models import Priority, PriorityItem, RunReport
from .producer import Producer, days_from_now, default_batch

__all__ = [
    "AssignflowError",
    "Consumer",
    "Coordinator",
    "ItemsFileError",
    "Priority",
    "PriorityItem",
    "Producer",
    "ProductionError",
    "ProtocolError",
    "RunReport",
    "SharedChannel",
    "days_from_now",
    "default_batch",
]
