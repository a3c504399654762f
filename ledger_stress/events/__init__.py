"""
Event wait gates used to confirm asynchronous creates during fixture generation.
"""

from ledger_stress.events.constants import POST_ACCOUNT, POST_LEDGER
from ledger_stress.events.polling import PollingNotificationGate
from ledger_stress.events.recorder import EventRecorder, NotificationGate

__all__ = [
    "POST_ACCOUNT",
    "POST_LEDGER",
    "EventRecorder",
    "NotificationGate",
    "PollingNotificationGate",
]
