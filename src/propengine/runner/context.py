"""Per-case and per-run state threaded explicitly through the runner.

CaseContext is handed to every test body invocation; RegenBudget is the
flat_map() regeneration allowance shared by a runner and all of its clones.
Neither lives in thread-local or global state, so runs nest and re-enter
freely.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass, field

__all__ = ["CaseContext", "RegenBudget"]


@dataclass(frozen=True, slots=True)
class CaseContext:
    """Execution context of one test body invocation.

    Attributes:
        is_minimal_case: True only for the single extra invocation made on
            the final shrunk counterexample. Test bodies can use it to emit
            extra diagnostics exactly once.
    """

    is_minimal_case: bool = False


@dataclass(slots=True)
class RegenBudget:
    """Run-wide counter of flat_map() regenerations.

    Mutability Note:
        Intentionally mutable; one instance is shared by reference between a
        TestRunner and every clone handed to combinators during the run.

    Attributes:
        limit: Maximum regenerations for the whole run
        used: Regenerations granted so far
    """

    limit: int
    used: int = field(default=0, init=False)

    def take(self) -> bool:
        """Grant one regeneration if the budget allows it."""
        if self.used >= self.limit:
            return False
        self.used += 1
        return True

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.used)
