"""Reason: why a case was rejected or failed.

A Reason carries a human-readable message plus, optionally, the source
location that produced it and a formatted traceback. Two reasons compare
equal when their messages are equal; location and backtrace are diagnostic
payload only, so reject statistics group by message.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

import sys
import traceback
from dataclasses import dataclass, field

__all__ = ["Reason"]


@dataclass(frozen=True, slots=True)
class Reason:
    """Explanation attached to a rejection, failure or abort.

    Attributes:
        message: Human-readable explanation
        location: "path:line" of the code that produced the reason (optional)
        backtrace: Formatted traceback text (optional)

    Example:
        >>> Reason("value too large") == Reason("value too large", location="x.py:1")
        True
        >>> str(Reason("boom", location="test_x.py:12"))
        'boom at test_x.py:12'
    """

    message: str
    location: str | None = field(default=None, compare=False)
    backtrace: str | None = field(default=None, compare=False, repr=False)

    @classmethod
    def with_location(cls, message: str, *, depth: int = 1) -> Reason:
        """Create a reason tagged with the caller's source location.

        Args:
            message: Human-readable explanation
            depth: Frames to skip above the caller (1 = direct caller)

        Returns:
            Reason whose location is the calling frame's "path:line"
        """
        frame = sys._getframe(depth)
        return cls(message, location=f"{frame.f_code.co_filename}:{frame.f_lineno}")

    @classmethod
    def from_exception(cls, exc: BaseException) -> Reason:
        """Convert an exception raised by a test body into a failure reason.

        The message names the exception type so that an assertion failure and
        a KeyError with the same text stay distinguishable. The location is
        the innermost frame of the traceback.

        Args:
            exc: Exception caught while running a case

        Returns:
            Reason with message, location and formatted traceback
        """
        text = str(exc)
        message = f"{type(exc).__name__}: {text}" if text else type(exc).__name__

        location = None
        frames = traceback.extract_tb(exc.__traceback__)
        if frames:
            last = frames[-1]
            location = f"{last.filename}:{last.lineno}"

        backtrace = "".join(traceback.format_exception(exc))
        return cls(message, location=location, backtrace=backtrace)

    def display_detailed(self) -> str:
        """Render message, location and backtrace (if captured)."""
        text = str(self)
        if self.backtrace:
            text = f"{text}\n{self.backtrace.rstrip()}"
        return text

    def __str__(self) -> str:
        if self.location:
            return f"{self.message} at {self.location}"
        return self.message
