from .errors import QueuedSaveFailedError
from .host import SaveQueuingHost
from .save_queuing import SaveQueuing

__all__ = [
    "QueuedSaveFailedError",
    "SaveQueuing",
    "SaveQueuingHost",
]
