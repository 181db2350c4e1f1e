"""PropEngine exception hierarchy.

Two families share the PropEngineError base:

    TestCaseError - raised inside one case (by a test body or new_tree)
    ├─ TestCaseReject   input unusable, redraw
    └─ TestCaseFail     counterexample found

    TestError - terminal outcome of a whole run
    ├─ TestAbort        budget exhausted, inconclusive
    └─ TestFail         minimal counterexample

All exceptions store a Reason for rich error information.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from pprint import pformat

from .reason import Reason

__all__ = [
    "PropEngineError",
    "TestAbort",
    "TestCaseError",
    "TestCaseFail",
    "TestCaseReject",
    "TestError",
    "TestFail",
]


class PropEngineError(Exception):
    """Base exception for all PropEngine errors.

    Attributes:
        reason: Structured reason
    """

    def __init__(self, reason: str | Reason) -> None:
        """Initialize PropEngineError.

        Args:
            reason: Message string OR Reason object
        """
        if not isinstance(reason, Reason):
            reason = Reason(reason)
        self.reason: Reason = reason
        super().__init__(str(reason))


class TestCaseError(PropEngineError):
    """Outcome of a single case other than success.

    Raise a subclass from a test body (or use the prop_assert helpers) to
    classify the case explicitly.
    """

    __test__ = False


class TestCaseReject(TestCaseError):
    """The input is unusable; draw another one.

    Raised by test bodies via prop_assume() and by Strategy.new_tree()
    when a draw cannot produce a value. Never surfaces to the caller of
    TestRunner.run(); rejections only consume reject budgets.
    """

    def __str__(self) -> str:
        return f"Input rejected at {self.reason}"


class TestCaseFail(TestCaseError):
    """The input is a counterexample.

    Any other exception escaping a test body is reinterpreted as a
    TestCaseFail carrying Reason.from_exception().
    """

    def __str__(self) -> str:
        return f"Case failed: {self.reason}"


class TestError(PropEngineError):
    """Terminal outcome of TestRunner.run()."""

    __test__ = False


class TestAbort(TestError):
    """The run was inconclusive: a budget was exhausted.

    No shrinking happens, since there is no failing value to shrink.
    """

    def __str__(self) -> str:
        return f"Test aborted: {self.reason}"


class TestFail(TestError):
    """A genuine counterexample, already shrunk.

    Attributes:
        value: Minimal failing input
    """

    def __init__(self, reason: str | Reason, value: object) -> None:
        """Initialize TestFail.

        Args:
            reason: Why the minimal input fails
            value: Minimal failing input
        """
        super().__init__(reason)
        self.value = value

    def __str__(self) -> str:
        return f"Test failed: {self.reason}.\nminimal failing input: {pformat(self.value)}"
