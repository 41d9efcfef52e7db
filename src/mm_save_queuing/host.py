"""Host resource with a switchable save strategy."""

from collections.abc import Awaitable, Callable
from typing import Generic, ParamSpec, TypeVar

from .save_queuing import SaveQueuing


T = TypeVar("T")
P = ParamSpec("P")


class SaveQueuingHost(Generic[T, P]):
    """A resource whose saves can be routed through SaveQueuing.

    The resource holds `save_operation`, the strategy used by `save_changes`.
    Enabling save queuing points it at a SaveQueuing created on first use; disabling
    points it back at the save operation captured at that moment. The SaveQueuing
    lives as long as the host, so its in-flight and queued saves survive a
    disable/enable cycle.

    Example:
        host = SaveQueuingHost(store.save, name="store")
        host.enable_save_queuing()
        await asyncio.gather(host.save_changes(a), host.save_changes(b))  # run one after another
    """

    def __init__(
        self,
        save_operation: Callable[P, Awaitable[T]],
        *,
        name: str | None = None,
        suppress_logging: bool = False,
    ) -> None:
        self.save_operation: Callable[P, Awaitable[T]] = save_operation
        self.save_queuing: SaveQueuing[T, P] | None = None  # Created on first enable
        self.name = name
        self.suppress_logging = suppress_logging

    def save_changes(self, *args: P.args, **kwargs: P.kwargs) -> Awaitable[T]:
        return self.save_operation(*args, **kwargs)

    def enable_save_queuing(self, enable: bool = True) -> None:
        """Route saves through save queuing, or back to the original save operation.

        Repeated calls with the same value only re-point the routing.
        """
        if self.save_queuing is None:
            self.save_queuing = SaveQueuing(
                self.save_operation, name=self.name, suppress_logging=self.suppress_logging
            )
        if enable:
            self.save_operation = self.save_queuing.submit_save
        else:
            self.save_operation = self.save_queuing.base_save

    @property
    def is_save_queuing_enabled(self) -> bool:
        return self.save_queuing is not None and self.save_operation == self.save_queuing.submit_save
