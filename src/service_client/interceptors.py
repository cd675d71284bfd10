"""Interceptor chains for request and response hooks."""

from dataclasses import dataclass
from typing import Any, Callable, Iterator, List, Optional


@dataclass(frozen=True)
class Interceptor:
    """Pair of hooks invoked for every request or response.

    Attributes:
        fulfilled: Called with the value on success, returns the (possibly
            modified) value.
        rejected: Called with the exception on failure. Raises to keep the
            request failed (either the same or a translated error) or returns
            a value to recover.

    Example:
        >>> def translate(error):
        ...     raise NotFoundError() from error
        >>> Interceptor(fulfilled=lambda response: response, rejected=translate)
    """

    fulfilled: Optional[Callable[[Any], Any]] = None
    rejected: Optional[Callable[[BaseException], Any]] = None


class InterceptorChain:
    """
    Ordered list of interceptors.

    Handlers run in registration order. ``run`` threads either a value or an
    error through the chain, so a failure raised by one handler reaches the
    ``rejected`` hooks of every handler registered after it.
    """

    def __init__(self):
        self._handlers: List[Optional[Interceptor]] = []

    def use(
        self,
        fulfilled: Optional[Callable[[Any], Any]] = None,
        rejected: Optional[Callable[[BaseException], Any]] = None,
    ) -> int:
        """
        Register a handler pair.

        Returns:
            Handle that can be passed to eject()
        """
        self._handlers.append(Interceptor(fulfilled=fulfilled, rejected=rejected))
        return len(self._handlers) - 1

    def eject(self, handle: int) -> None:
        """Remove a handler registered with use()."""
        if 0 <= handle < len(self._handlers):
            self._handlers[handle] = None

    def clear(self) -> None:
        """Remove all handlers."""
        self._handlers.clear()

    def __iter__(self) -> Iterator[Interceptor]:
        return (handler for handler in self._handlers if handler is not None)

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def run(self, value: Any = None, error: Optional[Exception] = None) -> Any:
        """
        Run the chain.

        Args:
            value: Value for the success path
            error: Exception for the failure path (takes precedence over value)

        Returns:
            Final value

        Raises:
            The error left over after the last handler.
        """
        for handler in self:
            if error is None:
                if handler.fulfilled is None:
                    continue
                try:
                    value = handler.fulfilled(value)
                except Exception as exc:
                    error = exc
            else:
                if handler.rejected is None:
                    continue
                try:
                    value = handler.rejected(error)
                    error = None
                except Exception as exc:
                    error = exc

        if error is not None:
            raise error
        return value
