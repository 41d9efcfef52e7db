"""Errors raised by save queuing."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .save_queuing import SaveQueuing


class QueuedSaveFailedError(Exception):
    """Raised for a queued save that was never attempted because an earlier save failed.

    The error of the save that actually failed is available as `inner_error`
    and is also chained as `__cause__`.
    """

    def __init__(self, inner_error: BaseException, save_queuing: SaveQueuing | None = None) -> None:
        super().__init__("Queued save failed")
        self.inner_error = inner_error
        self.save_queuing = save_queuing
        self.__cause__ = inner_error
