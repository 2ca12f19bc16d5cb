# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from collections.abc import Callable
from typing import Any


class Repeater:
    """
    Execute a given function for each item of a collection,
    with optional per-exception handling and tracking of encountered errors.

    Used by commands operating on several jobs at once (e.g., `portal cancel`)
    so that a failure for one job is reported without aborting the rest.

    Attributes:
        items (list[Any]): List of items to process.
        encountered_errors (dict[int, BaseException]): A dictionary mapping
            item indices to exceptions encountered during execution.
        current_iteration (int): The index of the item currently being processed.

    Args:
        items (list[Any]): A list of items to iterate over.
        func (Callable): Function to execute for each item. The item will be passed
            as the first argument, followed by any `*args` and `**kwargs`.
        *args (Any): Positional arguments forwarded to `func`.
        **kwargs (Any): Keyword arguments forwarded to `func`.
    """

    def __init__(
        self,
        items: list[Any],
        func: Callable,
        *args: Any,
        **kwargs: Any,
    ):
        self.encountered_errors: dict[int, BaseException] = {}
        self.items = items
        self.current_iteration = 0

        self._handlers: dict[type[BaseException], Callable[[BaseException, Any], Any]] = {}
        self._func = func
        self._args = args
        self._kwargs = kwargs

    def onException(self, exc_type: type[BaseException], handler: Callable) -> None:
        """
        Register a handler function for a specific exception type.

        Handlers are matched in registration order, so register
        more specific exception types first.

        Args:
            exc_type (type[BaseException]): The exception type to handle.
            handler (Callable): Function to call when `exc_type` is raised.
                The handler must accept two arguments:
                - BaseException: The caught exception instance.
                - Repeater: Reference to this `Repeater` instance.
        """
        self._handlers[exc_type] = handler

    def run(self) -> None:
        """
        Execute the target function for all items, invoking handlers for exceptions.

        Unhandled exceptions propagate normally and interrupt the iteration.
        Handled exceptions are recorded in `encountered_errors`, mapping the
        item's index to the raised exception instance.
        """
        for i, item in enumerate(self.items):
            self.current_iteration = i
            try:
                self._func(item, *self._args, **self._kwargs)
            except tuple(self._handlers.keys()) as e:
                self.encountered_errors[i] = e
                handler = next(
                    h for t, h in self._handlers.items() if isinstance(e, t)
                )
                handler(e, self)
