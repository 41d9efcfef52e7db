"""Save queuing for resources that allow only one save in flight at a time.

While a save is running, further saves are deferred into a FIFO queue and
replayed one by one once the running save completes. If the running save
fails, every queued save fails with QueuedSaveFailedError without being attempted.
"""

import asyncio
import functools
import logging
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, ParamSpec, TypeVar

from .errors import QueuedSaveFailedError

logger = logging.getLogger(__name__)


T = TypeVar("T")
P = ParamSpec("P")


class SaveQueuing(Generic[T, P]):
    """Serialize calls to an async save operation, queuing the ones that arrive mid-save.

    All bookkeeping runs synchronously on the event loop thread, so no other call
    can slip in between checking and setting `is_saving`.

    Example:
        save_queuing = SaveQueuing(manager.save_changes, name="orders")
        first = save_queuing.submit_save(changes_a)  # runs immediately
        second = save_queuing.submit_save(changes_b)  # queued until `first` completes
        result_a, result_b = await asyncio.gather(first, second)
    """

    @dataclass
    class PendingSave:
        args: tuple[Any, ...]
        kwargs: dict[str, Any]
        future: asyncio.Future[Any]  # Handed to the caller; settled exactly once

    def __init__(
        self,
        base_save: Callable[P, Awaitable[T]],
        *,
        name: str | None = None,
        suppress_logging: bool = False,
    ) -> None:
        """Initialize SaveQueuing.

        Args:
            base_save: The underlying save operation; must not be called concurrently
            name: Optional name used in log records
            suppress_logging: If True, failed saves are not logged
        """
        self.base_save = base_save
        self.name = name
        self.suppress_logging = suppress_logging
        self.is_saving = False  # True while a base_save call is in flight
        self._queue: deque[SaveQueuing.PendingSave] = deque()

    @property
    def pending_count(self) -> int:
        """Number of queued saves waiting for their turn."""
        return len(self._queue)

    def submit_save(self, *args: P.args, **kwargs: P.kwargs) -> asyncio.Future[T]:
        """Run the save now if idle, otherwise queue it behind the running one.

        Must be called from a running event loop. Save errors never raise here;
        they are delivered through the returned future.

        Returns:
            Future resolved with this call's own save result. Fails with the save's
            error, or with QueuedSaveFailedError if an earlier save failed first.
        """
        entry = SaveQueuing.PendingSave(args, kwargs, asyncio.get_running_loop().create_future())
        if self.is_saving:
            self._queue.append(entry)
            logger.debug("Save in progress, save queued", extra={"save_queuing": self.name, "pending": len(self._queue)})
            return entry.future

        self.is_saving = True
        self._run(entry)
        return entry.future

    def _run(self, entry: PendingSave) -> None:
        try:
            task = asyncio.ensure_future(self.base_save(*entry.args, **entry.kwargs))
        except Exception as err:
            self._save_failed(entry, err)
            return
        task.add_done_callback(functools.partial(self._on_save_done, entry))

    def _on_save_done(self, entry: PendingSave, task: asyncio.Future[Any]) -> None:
        if task.cancelled():
            self._save_failed(entry, asyncio.CancelledError())
            return
        error = task.exception()
        if error is None:
            self._save_succeeded(entry, task.result())
        else:
            self._save_failed(entry, error)

    def _save_succeeded(self, entry: PendingSave, result: object) -> None:
        _set_result(entry.future, result)
        if not self._queue:
            self.is_saving = False
            return
        # is_saving stays True: the next queued save takes over right away
        next_entry = self._queue.popleft()
        logger.debug("Replaying queued save", extra={"save_queuing": self.name, "pending": len(self._queue)})
        self._run(next_entry)

    def _save_failed(self, entry: PendingSave, error: BaseException) -> None:
        self.is_saving = False
        dropped = 0
        while self._queue:
            queued = self._queue.popleft()
            _set_exception(queued.future, QueuedSaveFailedError(error, self))
            dropped += 1

        if not self.suppress_logging:
            logger.error(
                "Save failed",
                exc_info=error,
                extra={"save_queuing": self.name, "dropped_saves": dropped},
            )

        if isinstance(error, asyncio.CancelledError):
            entry.future.cancel()
        else:
            _set_exception(entry.future, error)


def _set_result(future: asyncio.Future[Any], result: object) -> None:
    # The caller may have cancelled its future; the save itself still ran
    if not future.done():
        future.set_result(result)


def _set_exception(future: asyncio.Future[Any], error: BaseException) -> None:
    if not future.done():
        future.set_exception(error)
