"""Structural protocols and result types for the test runner."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from .errors import InternalError


@runtime_checkable
class TypeNameResolver(Protocol):
    """Maps an opaque type tag to a human-readable name.

    Returns ``None`` when the tag can't be named; the capture then records
    an "unknown" chain element. Implementations may cache between calls.
    """

    def resolve(self, type_tag: Any) -> str | None: ...


@runtime_checkable
class Reporter(Protocol):
    """Line-oriented sink for everything the runner prints.

    ``StreamReporter`` is the stock implementation. Tests substitute one
    backed by ``io.StringIO``.
    """

    def begin_suite(self, total: int) -> None: ...

    def test_started(self, identity: "TestIdentity", index: int) -> None: ...

    def test_finished(self, outcome: "TestOutcome", failed_so_far: int) -> None: ...

    def detail(self, text: str) -> None: ...

    def flush_user_output(self) -> None: ...

    def summary(self, report: "SuiteReport") -> None: ...

    def internal_error(self, message: str) -> None: ...


@dataclass(frozen=True, order=True)
class TestIdentity:
    """Where a test lives and what it's called.

    Ordering is ``(file, line, name)``, which groups tests by file and gives
    the run a deterministic order.
    """

    __test__ = False

    file: str
    line: int
    name: str

    @property
    def location(self) -> str:
        return f"{self.file}:{self.line}"


class TestStatus(enum.Enum):
    __test__ = False

    PENDING = "pending"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"


@dataclass
class TestOutcome:
    """Result of one test. Owned by the runner.

    ``failed`` may flip to ``True`` only while the test is ``RUNNING``;
    ``finish()`` closes the slot and freezes the outcome.
    """

    __test__ = False

    identity: TestIdentity
    status: TestStatus = TestStatus.PENDING
    failed: bool = False
    duration: float = 0.0

    def start(self) -> None:
        if self.status is not TestStatus.PENDING:
            raise InternalError(
                f"Test `{self.identity.name}` was started twice."
            )
        self.status = TestStatus.RUNNING
        self.failed = False

    def mark_failed(self) -> None:
        if self.status is not TestStatus.RUNNING:
            raise InternalError(
                f"Test `{self.identity.name}` was failed after it finished."
            )
        self.failed = True

    def finish(self, duration: float) -> None:
        if self.status is not TestStatus.RUNNING:
            raise InternalError(
                f"Test `{self.identity.name}` finished without running."
            )
        self.duration = duration
        self.status = TestStatus.FAILED if self.failed else TestStatus.PASSED

    @property
    def duration_ms(self) -> float:
        return self.duration * 1000.0


@dataclass(frozen=True)
class SuiteReport:
    """Aggregated outcomes of a completed run, in run order."""

    outcomes: tuple[TestOutcome, ...] = field(default_factory=tuple)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def failed(self) -> list[TestOutcome]:
        return [o for o in self.outcomes if o.status is TestStatus.FAILED]

    @property
    def passed_count(self) -> int:
        return sum(1 for o in self.outcomes if o.status is TestStatus.PASSED)

    @property
    def all_passed(self) -> bool:
        return not self.failed

    @property
    def exit_code(self) -> int:
        return 0 if self.all_passed else 1
