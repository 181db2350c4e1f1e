"""Diagnostic types for PropEngine.

Provides Reason (message + location + backtrace) and the exception
hierarchy used to classify cases and report run outcomes.

Python 3.13+. Zero external dependencies.
"""

from .errors import (
    PropEngineError,
    TestAbort,
    TestCaseError,
    TestCaseFail,
    TestCaseReject,
    TestError,
    TestFail,
)
from .reason import Reason

__all__ = [
    "PropEngineError",
    "Reason",
    "TestAbort",
    "TestCaseError",
    "TestCaseFail",
    "TestCaseReject",
    "TestError",
    "TestFail",
]
