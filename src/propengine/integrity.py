"""Strategy contract violations.

These exceptions indicate DEFECTS in a Strategy or ValueTree
implementation, not findings about the code under test. They must never be
reported as a counterexample: the runner lets them propagate unchanged so a
malformed custom strategy is not mistaken for a failing property.

Design:
    - NOT subclasses of PropEngineError (different error domain)
    - Carry diagnostic context for post-mortem analysis
    - @final decorator prevents subclassing of concrete errors

Hierarchy:
    IntegrityError (base - implementation defects)
    └─ StrategyContractError (ValueTree broke its simplify/complicate contract)

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import final

__all__ = [
    "IntegrityContext",
    "IntegrityError",
    "StrategyContractError",
]


@dataclass(frozen=True, slots=True)
class IntegrityContext:
    """Context for contract violation diagnosis.

    Attributes:
        component: Combinator where the violation was detected (filter, union, ...)
        operation: Operation being performed (simplify, complicate, new_tree)
        detail: Rendered tree or value state (optional)
    """

    component: str
    operation: str
    detail: str | None = None


class IntegrityError(Exception):
    """Base exception for implementation defects.

    Attributes:
        context: Structured diagnostic context for post-mortem analysis
    """

    def __init__(self, message: str, context: IntegrityContext | None = None) -> None:
        """Initialize IntegrityError.

        Args:
            message: Human-readable error description
            context: Structured diagnostic context (optional)
        """
        super().__init__(message)
        self._context = context

    @property
    def context(self) -> IntegrityContext | None:
        """Structured diagnostic context."""
        return self._context

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return f"{self.__class__.__name__}({self.args[0]!r}, context={self._context!r})"


@final
class StrategyContractError(IntegrityError):
    """A ValueTree could not honour the shrinking contract.

    Raised, for example, when a filtered tree exhausts complicate() without
    getting back to a value its predicate accepts. Since the filter only
    ever moves away from accepted values, this means the inner tree's
    complicate() does not undo its simplify().
    """
