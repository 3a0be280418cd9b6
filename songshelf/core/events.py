"""
Typed event channels used between Songshelf components.
"""

import asyncio
import inspect
from pathlib import Path
from typing import Any, Callable, Generic, List, Optional, TypeVar

from pydantic import BaseModel

from songshelf.utils.logger import get_logger

T = TypeVar('T')


class LibraryChanged(BaseModel):
    """Fired after a track has been committed to the store; listeners should rescan."""
    store_root: Path
    title: Optional[str] = None


class Signal(Generic[T]):
    """
    A named observer list carrying one payload type.

    Handlers may be plain callables or coroutine functions. A handler that
    raises is logged and does not stop delivery to the remaining handlers.
    """

    def __init__(self, name: str):
        self.name = name
        self.logger = get_logger(__name__)
        self._handlers: List[Callable[[T], Any]] = []

    def connect(self, handler: Callable[[T], Any]) -> None:
        if handler not in self._handlers:
            self._handlers.append(handler)

    def disconnect(self, handler: Callable[[T], Any]) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    @property
    def handler_count(self) -> int:
        return len(self._handlers)

    def emit(self, payload: T) -> None:
        """
        Deliver a payload synchronously.

        Coroutine handlers are scheduled on the running loop when there is
        one, and skipped with a warning otherwise.
        """
        for handler in list(self._handlers):
            try:
                result = handler(payload)
                if inspect.isawaitable(result):
                    try:
                        loop = asyncio.get_running_loop()
                    except RuntimeError:
                        self.logger.warning(f"No running loop for async handler on {self.name}; dropped")
                        if asyncio.iscoroutine(result):
                            result.close()
                        continue
                    asyncio.ensure_future(result, loop=loop)
            except Exception as e:
                self.logger.error(f"Handler for {self.name} failed: {e}", exc_info=True)

    async def emit_async(self, payload: T) -> None:
        """Deliver a payload, awaiting coroutine handlers in registration order."""
        for handler in list(self._handlers):
            try:
                result = handler(payload)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                self.logger.error(f"Handler for {self.name} failed: {e}", exc_info=True)
