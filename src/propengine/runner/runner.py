"""TestRunner: generate, run, shrink and persist test cases.

Run Loop:
    1. Replay every persisted seed for config.source_file, in stored order.
    2. Generate fresh cases until config.cases of them have passed. Each
       case gets its own seed drawn from the run's master generator; that
       seed is what gets persisted if the case fails.
    3. On the first failing case, shrink it and raise TestFail with the
       smallest value observed to fail.

Case Classification:
    The test body returning normally is a pass. TestCaseReject is a reject
    (counted against max_global_rejects). TestCaseFail, or any other
    Exception, is a failure. StrategyContractError and TestError are never
    classified: they propagate unchanged, as do BaseExceptions such as
    KeyboardInterrupt.

Shrink Soundness:
    Only values that were actually run and observed to fail are ever
    reported. Shrinking stops when the tree cannot move any further, after
    max_shrink_iters shrink steps, or after max_shrink_time milliseconds.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

import logging
import time
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from propengine.constants import DEFAULT_EDGE_BIAS
from propengine.diagnostics import (
    Reason,
    TestAbort,
    TestCaseFail,
    TestCaseReject,
    TestError,
    TestFail,
)
from propengine.enums import CaseOutcome, Verbosity
from propengine.integrity import IntegrityError
from propengine.rng import TestRng
from propengine.strategy.traits import Strategy, ValueTree

from .config import Config
from .context import CaseContext, RegenBudget
from .persistence import PersistedSeed, encode_edge_bias
from .result_cache import CachedResult, ResultCache

__all__ = ["TestRunner"]

logger = logging.getLogger(__name__)

type TestBody[V] = Callable[[V], object]
type ContextTestBody[V] = Callable[[V, CaseContext], object]


def _classify(exc: Exception) -> CachedResult:
    match exc:
        case TestCaseReject():
            return CachedResult.rejected(exc.reason)
        case TestCaseFail():
            return CachedResult.failed(exc.reason)
        case _:
            return CachedResult.failed(Reason.from_exception(exc))


@dataclass(frozen=True, slots=True)
class _Trial:
    """One execution of the test body against a tree's current value."""

    result: CachedResult
    value: Any
    cache_hit: bool = False
    produced: bool = True


class TestRunner:
    """Drives a strategy and a test body through a complete run.

    Combinators receive the runner in Strategy.new_tree() and use it for
    randomness (rng, new_rng()), local reject accounting (reject_local()),
    deferred draws (partial_clone(), clone()) and the shared flat_map()
    regeneration budget (flat_map_regen()).

    Attributes:
        config: Run configuration
        rng: Random source strategies draw from; during run() this is the
            current case's generator
        edge_bias: Probability that leaf generators favour boundary values
        successes: Fresh cases that passed
        local_rejects: Rejected draws
        global_rejects: Cases rejected by the test body
    """

    __test__ = False

    def __init__(
        self,
        config: Config | None = None,
        rng: TestRng | None = None,
        *,
        regen_budget: RegenBudget | None = None,
    ) -> None:
        """Initialize TestRunner.

        Args:
            config: Run configuration (default: Config())
            rng: Master random source (default: built from config.rng_seed)
            regen_budget: Shared flat_map() budget; only runner clones pass this
        """
        self.config = config if config is not None else Config()
        self.rng = (
            rng
            if rng is not None
            else TestRng.from_rng_seed(self.config.rng_algorithm, self.config.rng_seed)
        )
        self.edge_bias = DEFAULT_EDGE_BIAS
        self.successes = 0
        self.local_rejects = 0
        self.global_rejects = 0
        self.cache_hit_passes = 0
        self.local_reject_detail: Counter[Reason] = Counter()
        self.global_reject_detail: Counter[Reason] = Counter()
        if regen_budget is None:
            regen_budget = RegenBudget(self.config.max_flat_map_regens)
        self._regen_budget = regen_budget

    @classmethod
    def deterministic(cls, config: Config | None = None) -> TestRunner:
        """Runner whose master generator uses the library-wide fixed seed."""
        config = config if config is not None else Config()
        return cls(config, TestRng.deterministic(config.rng_algorithm))

    # ------------------------------------------------------------------
    # API used by strategies
    # ------------------------------------------------------------------

    def new_rng(self) -> TestRng:
        """Fork an independent generator from the current one."""
        return self.rng.gen_rng()

    def partial_clone(self) -> TestRunner:
        """Runner for deferred draws: forked rng, fresh counters, shared budget."""
        other = TestRunner(self.config, self.new_rng(), regen_budget=self._regen_budget)
        other.edge_bias = self.edge_bias
        return other

    def clone(self) -> TestRunner:
        """Runner continuing from this one's exact rng state and counters."""
        other = TestRunner(self.config, self.rng.clone(), regen_budget=self._regen_budget)
        other.edge_bias = self.edge_bias
        other.successes = self.successes
        other.local_rejects = self.local_rejects
        other.global_rejects = self.global_rejects
        other.cache_hit_passes = self.cache_hit_passes
        other.local_reject_detail = self.local_reject_detail.copy()
        other.global_reject_detail = self.global_reject_detail.copy()
        return other

    def flat_map_regen(self) -> bool:
        """Consume one unit of the run-wide flat_map() regeneration budget."""
        return self._regen_budget.take()

    @property
    def flat_map_regens(self) -> int:
        """flat_map() regenerations granted so far in this run."""
        return self._regen_budget.used

    def reject_local(self, whence: str | Reason) -> None:
        """Record a rejected draw.

        Raises:
            TestAbort: Once max_local_rejects draws have been rejected
        """
        reason = whence if isinstance(whence, Reason) else Reason(whence)
        self.local_rejects += 1
        self.local_reject_detail[reason] += 1
        if self.local_rejects >= self.config.max_local_rejects:
            raise TestAbort(Reason(f"Too many local rejects ({self.local_rejects})"))

    def _reject_global(self, reason: Reason) -> None:
        self.global_rejects += 1
        self.global_reject_detail[reason] += 1
        self._trace("Case rejected: %s", reason)
        if self.global_rejects >= self.config.max_global_rejects:
            raise TestAbort(Reason(f"Too many global rejects ({self.global_rejects})"))

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------

    def _info(self, msg: str, *args: object) -> None:
        if self.config.verbose >= Verbosity.FAILURES:
            logger.info(msg, *args)

    def _trace(self, msg: str, *args: object) -> None:
        if self.config.verbose >= Verbosity.TRACE:
            logger.debug(msg, *args)

    # ------------------------------------------------------------------
    # Running
    # ------------------------------------------------------------------

    def run[V](self, strategy: Strategy[V], test: TestBody[V]) -> None:
        """Run test against values from strategy until config.cases pass.

        Raises:
            TestFail: A counterexample was found; carries the shrunk value
            TestAbort: A reject budget was exhausted
        """

        def body(value: V, ctx: CaseContext) -> object:
            return test(value)

        self.run_with_context(strategy, body)

    def run_with_context[V](self, strategy: Strategy[V], test: ContextTestBody[V]) -> None:
        """Like run(), but test also receives the CaseContext.

        Raises:
            TestFail: A counterexample was found; carries the shrunk value
            TestAbort: A reject budget was exhausted
        """
        cache = self.config.result_cache()
        master = self.rng
        try:
            for persisted in self._load_persisted():
                self._run_persisted(strategy, test, cache, persisted, master)
            while self.successes < self.config.cases:
                repeated = self._run_fresh(strategy, test, cache, master)
                if repeated and self.cache_hit_passes >= self.config.max_global_rejects:
                    self._info(
                        "Stopping after %d passing cases repeated earlier values",
                        self.cache_hit_passes,
                    )
                    break
        except TestAbort as exc:
            self._info("Run aborted: %s\n%s", exc.reason, self)
            raise
        finally:
            self.rng = master
        self._info("Run passed: %s", self)

    def run_one[V](self, tree: ValueTree[V], test: TestBody[V]) -> CaseOutcome:
        """Run test on one already drawn tree, shrinking it on failure.

        Nothing is persisted and no budgets besides the shrink limits apply.

        Returns:
            CaseOutcome.PASS or CaseOutcome.REJECT

        Raises:
            TestFail: The value failed; carries the shrunk value
        """

        def body(value: V, ctx: CaseContext) -> object:
            return test(value)

        cache = self.config.result_cache()
        trial = self._probe(tree, body, cache)
        if trial.result.outcome is CaseOutcome.FAIL:
            self._fail(tree, body, cache, trial)
        return trial.result.outcome

    def _load_persisted(self) -> list[PersistedSeed]:
        persistence = self.config.failure_persistence
        if persistence is None:
            return []
        seeds = persistence.load_persisted_failures(self.config.source_file)
        if seeds:
            self._info("Replaying %d persisted failure seed(s)", len(seeds))
        return seeds

    def _gen_tree[V](self, strategy: Strategy[V]) -> ValueTree[V]:
        while True:
            try:
                return strategy.new_tree(self)
            except TestCaseReject as exc:
                self.reject_local(exc.reason)

    def _run_persisted[V](
        self,
        strategy: Strategy[V],
        test: ContextTestBody[V],
        cache: ResultCache,
        persisted: PersistedSeed,
        master: TestRng,
    ) -> None:
        edge_bias = self.edge_bias
        persisted_bias = persisted.edge_bias_value
        if persisted_bias is not None:
            self.edge_bias = persisted_bias
        try:
            self.rng = TestRng(persisted.seed)
            tree = self._gen_tree(strategy)
            trial = self._probe(tree, test, cache)
            match trial.result.outcome:
                case CaseOutcome.FAIL:
                    self._info("Persisted seed %s still fails", persisted.seed)
                    self._fail(tree, test, cache, trial)
                case CaseOutcome.REJECT:
                    assert trial.result.reason is not None
                    self._reject_global(trial.result.reason)
                case CaseOutcome.PASS:
                    self._trace("Persisted seed %s passes", persisted.seed)
        finally:
            self.edge_bias = edge_bias
            self.rng = master

    def _run_fresh[V](
        self,
        strategy: Strategy[V],
        test: ContextTestBody[V],
        cache: ResultCache,
        master: TestRng,
    ) -> bool:
        """Run one freshly seeded case; True if it passed on a cached result."""
        self.rng = TestRng(master.gen_seed())
        seed = self.rng.seed
        tree = self._gen_tree(strategy)
        trial = self._probe(tree, test, cache)
        match trial.result.outcome:
            case CaseOutcome.PASS if trial.cache_hit:
                self.cache_hit_passes += 1
                return True
            case CaseOutcome.PASS:
                self.successes += 1
            case CaseOutcome.REJECT:
                assert trial.result.reason is not None
                self._reject_global(trial.result.reason)
            case CaseOutcome.FAIL:
                self._info("Case failed: %s; shrinking", trial.result.reason)
                persisted = PersistedSeed(seed, encode_edge_bias(self.edge_bias))
                self._fail(tree, test, cache, trial, persisted)
        return False

    def _call[V](self, test: ContextTestBody[V], value: V, ctx: CaseContext) -> CachedResult:
        try:
            test(value, ctx)
        except (IntegrityError, TestError):
            raise
        except Exception as exc:  # pylint: disable=broad-exception-caught
            return _classify(exc)
        return CachedResult.passed()

    def _probe[V](
        self, tree: ValueTree[V], test: ContextTestBody[V], cache: ResultCache
    ) -> _Trial:
        try:
            value = tree.current()
        except (IntegrityError, TestError):
            raise
        except Exception as exc:  # pylint: disable=broad-exception-caught
            return _Trial(_classify(exc), None, produced=False)

        key = repr(value)
        cached = cache.get(key)
        if cached is not None:
            self._trace("Cached %s for %s", cached.outcome, key)
            return _Trial(cached, value, cache_hit=True)

        result = self._call(test, value, CaseContext())
        cache.put(key, result)
        self._trace("Ran %s: %s", key, result.outcome)
        return _Trial(result, value)

    def _fail[V](
        self,
        tree: ValueTree[V],
        test: ContextTestBody[V],
        cache: ResultCache,
        trial: _Trial,
        seed: PersistedSeed | None = None,
    ) -> None:
        best = self._shrink(tree, test, cache, trial)
        assert best.result.reason is not None

        if best.produced:
            rerun = self._call(test, best.value, CaseContext(is_minimal_case=True))
            if rerun.outcome is not CaseOutcome.FAIL:
                self._info("Minimal case %r did not fail when re-run", best.value)

        persistence = self.config.failure_persistence
        if seed is not None and persistence is not None:
            persistence.save_persisted_failure(self.config.source_file, seed, best.value)

        self._info("Minimal failing input: %r (%s)", best.value, best.result.reason)
        raise TestFail(best.result.reason, best.value)

    def _shrink[V](
        self,
        tree: ValueTree[V],
        test: ContextTestBody[V],
        cache: ResultCache,
        trial: _Trial,
    ) -> _Trial:
        """Search for a simpler failing value.

        Every simplify() or complicate() that moves the tree is followed by
        one probe; a failing probe becomes the new best and the search keeps
        simplifying, a passing or rejected one makes it complicate.

        Returns:
            The last trial observed to fail
        """
        best = trial
        max_iters = self.config.effective_max_shrink_iters()
        deadline = None
        if self.config.max_shrink_time > 0:
            deadline = time.monotonic() + self.config.max_shrink_time / 1000

        if max_iters == 0 or not tree.simplify():
            return best
        iterations = 1

        while True:
            probe = self._probe(tree, test, cache)
            if probe.result.outcome is CaseOutcome.FAIL:
                # An unproduced value never replaces a real counterexample.
                if probe.produced or not best.produced:
                    best = probe
                    self._trace("Shrunk to failing %r", best.value)
                step = tree.simplify
            else:
                step = tree.complicate

            if iterations >= max_iters:
                self._info("Shrinking stopped after %d iterations", iterations)
                break
            if deadline is not None and time.monotonic() >= deadline:
                self._info("Shrinking stopped after %d ms", self.config.max_shrink_time)
                break
            iterations += 1
            if not step():
                break

        self._trace("Shrinking finished after %d iterations", iterations)
        return best

    def __str__(self) -> str:
        text = (
            f"{self.successes} successes, {self.local_rejects} local rejects, "
            f"{self.global_rejects} global rejects"
        )
        details = (("local", self.local_reject_detail), ("global", self.global_reject_detail))
        for label, detail in details:
            for reason, count in detail.most_common():
                text += f"\n  {count:>6} {label} rejects: {reason.message}"
        return text

    def __repr__(self) -> str:
        return (
            f"TestRunner(rng={self.rng!r}, successes={self.successes}, "
            f"local_rejects={self.local_rejects}, global_rejects={self.global_rejects})"
        )
