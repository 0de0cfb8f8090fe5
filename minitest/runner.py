"""TestRunner — runs registered tests one after another."""

from __future__ import annotations

import enum
import logging
import time
from collections.abc import Iterable

from .checks import CheckContext
from .config import RunnerConfig
from .errors import PASSTHROUGH, InternalError, InterruptTest
from .protocol import Reporter, SuiteReport, TestOutcome, TypeNameResolver
from .registry import Registry, TestEntry, default_registry
from .reporter import StreamReporter
from .resolver import QualifiedNameResolver

logger = logging.getLogger(__name__)


class SuiteState(enum.Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"


def collect_tests(entries: Iterable[TestEntry]) -> list[TestEntry]:
    """Order *entries* by identity, rejecting an empty or ambiguous set.

    Raises ``InternalError`` when there is nothing to run or when two
    entries share file, line and name.
    """
    by_identity: dict = {}
    for entry in entries:
        identity = entry.identity
        if identity in by_identity:
            raise InternalError(
                f"A duplicate test was registered at `{identity.location}`, "
                f"named `{identity.name}`."
            )
        by_identity[identity] = entry

    if not by_identity:
        raise InternalError("No tests to run.")

    return [by_identity[identity] for identity in sorted(by_identity)]


class TestRunner:
    """Runs every test of a registry in identity order.

    Each test moves ``PENDING → RUNNING → PASSED | FAILED``. The runner
    itself moves ``NOT_STARTED → RUNNING → COMPLETED`` and can run once.

    A test ends early on ``InterruptTest`` (raised by hard checks after
    they record their failure) without an extra report. Any other error
    escaping the test body fails that test only. ``InternalError``,
    ``KeyboardInterrupt`` and ``SystemExit`` stop the whole run.
    """

    __test__ = False

    def __init__(
        self,
        registry: Registry | None = None,
        *,
        config: RunnerConfig | None = None,
        reporter: Reporter | None = None,
        resolver: TypeNameResolver | None = None,
    ) -> None:
        self.registry = registry if registry is not None else default_registry
        self.config = config or RunnerConfig()
        self.reporter = reporter or StreamReporter(self.config.output_stream())
        self.resolver = resolver or QualifiedNameResolver()
        self.state = SuiteState.NOT_STARTED
        self._outcomes: list[TestOutcome] = []

    @property
    def outcomes(self) -> tuple[TestOutcome, ...]:
        return tuple(self._outcomes)

    # ------------------------------------------------------------------
    # Suite
    # ------------------------------------------------------------------

    def run(self) -> SuiteReport:
        """Run all tests and print the summary. Returns the aggregated report."""
        if self.state is not SuiteState.NOT_STARTED:
            raise InternalError("A TestRunner can only run once.")

        tests = collect_tests(self.registry.entries)
        logger.debug("Running %d tests", len(tests))

        self.state = SuiteState.RUNNING
        self.reporter.begin_suite(len(tests))
        ctx = CheckContext(self.reporter, self.resolver, self.config)

        failed = 0
        for index, entry in enumerate(tests, start=1):
            outcome = self._run_one(ctx, entry, index)
            if outcome.failed:
                failed += 1
            self.reporter.test_finished(outcome, failed)

        self.state = SuiteState.COMPLETED
        report = SuiteReport(outcomes=tuple(self._outcomes))
        self.reporter.summary(report)
        return report

    # ------------------------------------------------------------------
    # Single test
    # ------------------------------------------------------------------

    def _run_one(self, ctx: CheckContext, entry: TestEntry, index: int) -> TestOutcome:
        outcome = TestOutcome(identity=entry.identity)
        self._outcomes.append(outcome)
        self.reporter.test_started(entry.identity, index)

        outcome.start()
        started = time.perf_counter()
        with ctx.bind(outcome):
            try:
                entry.func(ctx)
            except InterruptTest:
                logger.debug("Test %s stopped early", entry.identity.name)
            except PASSTHROUGH:
                raise
            except BaseException as exc:  # noqa: BLE001
                ctx.record_uncaught(exc)
        outcome.finish(time.perf_counter() - started)
        return outcome


def run_tests(
    registry: Registry | None = None,
    *,
    config: RunnerConfig | None = None,
    reporter: Reporter | None = None,
    resolver: TypeNameResolver | None = None,
) -> int:
    """Run *registry* (the default one if omitted) and return the exit code.

    ``0`` when every test passed, ``1`` when any failed, ``2`` on an
    internal error.
    """
    runner = TestRunner(registry, config=config, reporter=reporter, resolver=resolver)
    try:
        return runner.run().exit_code
    except InternalError as exc:
        runner.reporter.internal_error(str(exc))
        return exc.exit_code
