from .backend import BASE_URL, FakeBackend
from .notifier import RecordingNotifier
from .principal import PrincipalFactory
from .records import PropertyRecordFactory

__all__ = [
    "BASE_URL",
    "FakeBackend",
    "RecordingNotifier",
    "PrincipalFactory",
    "PropertyRecordFactory",
]
