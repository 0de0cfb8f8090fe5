"""StreamReporter — writes the run log to a text stream.

Output looks like this::

    ########## [ file   ] --- tests/test_math.py
    1/2        [ run    ] adds
               [     OK ] adds (0.1 ms)
    2/2        [ run    ] divides
      .        [   .    ]     Assertion failed at:  tests/test_math.py:14
      .        [   .    ]         Expression:  1 / 2 == 0
      .        [   .    ]         Evaluated to false.
      1 failed [   FAIL ] divides (0.2 ms)   at:  tests/test_math.py:12

    Failed tests:
        divides   at:  tests/test_math.py:12

    Ran 2 tests, 1 passed, 1 FAILED
"""

from __future__ import annotations

import sys
from typing import TextIO

from .protocol import SuiteReport, TestIdentity, TestOutcome

# Same width as "  0 failed", the widest value of the failed counter.
_EMPTY_FAILED_COUNTER = " " * 10
_DETAIL_MARK = ".       "


def _failed_counter(failed: int) -> str:
    return f"{failed:>3} failed"


class StreamReporter:
    """Line-oriented reporter over *stream* (``sys.stderr`` by default).

    The first column holds a counter: ``i/N`` on start lines, the running
    failure count on end lines. Its width grows with the counters so detail
    lines stay aligned with the banners around them.

    ``user_streams`` are flushed before every framework line that follows
    user code, so the two interleave correctly when redirected to one file.
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        user_streams: tuple[TextIO, ...] | None = None,
    ) -> None:
        self._stream = stream if stream is not None else sys.stderr
        self._user_streams = user_streams
        self._total = 0
        self._counter_width = 0
        self._current_file: str | None = None
        self._failed_column = _EMPTY_FAILED_COUNTER

    # ------------------------------------------------------------------
    # Output helpers
    # ------------------------------------------------------------------

    def _write(self, line: str) -> None:
        self._stream.write(line + "\n")

    def flush_user_output(self) -> None:
        streams = self._user_streams
        if streams is None:
            streams = (sys.stdout, sys.stderr)
        for s in streams:
            s.flush()

    def _update_width(self, counter: str) -> None:
        self._counter_width = max(len(counter), len(self._failed_column))

    # ------------------------------------------------------------------
    # Reporter protocol
    # ------------------------------------------------------------------

    def begin_suite(self, total: int) -> None:
        self._total = total
        self._current_file = None
        self._failed_column = _EMPTY_FAILED_COUNTER

    def test_started(self, identity: TestIdentity, index: int) -> None:
        counter = f"{index}/{self._total}"
        self._update_width(counter)
        if identity.file != self._current_file:
            self._current_file = identity.file
            self._write(f"{'#' * self._counter_width} [ file   ] --- {identity.file}")
        self._write(f"{counter:<{self._counter_width}} [ run    ] {identity.name}")
        self._stream.flush()

    def test_finished(self, outcome: TestOutcome, failed_so_far: int) -> None:
        self.flush_user_output()
        if failed_so_far:
            self._failed_column = _failed_counter(failed_so_far)
        self._counter_width = max(self._counter_width, len(self._failed_column))

        status = "[   FAIL ]" if outcome.failed else "[     OK ]"
        line = (
            f"{self._failed_column:<{self._counter_width}} {status} "
            f"{outcome.identity.name} ({outcome.duration_ms:.1f} ms)"
        )
        if outcome.failed:
            line += f"   at:  {outcome.identity.location}"
        self._write(line)
        self._stream.flush()

    def detail(self, text: str) -> None:
        self._write(f"{_DETAIL_MARK:>{self._counter_width}} [   .    ] {text}")

    def summary(self, report: SuiteReport) -> None:
        failed = report.failed
        if not failed:
            self._write("")
            self._write(f"All {report.total} tests passed")
        else:
            name_width = max(len(o.identity.name) for o in failed)
            self._write("")
            self._write("Failed tests:")
            for outcome in failed:
                self._write(
                    f"    {outcome.identity.name:<{name_width}}   at:  "
                    f"{outcome.identity.location}"
                )
            self._write("")
            self._write(
                f"Ran {report.total} tests, {report.passed_count} passed, "
                f"{len(failed)} FAILED"
            )
        self._stream.flush()

    def internal_error(self, message: str) -> None:
        self._write(f"minitest: Internal error: {message}")
        self._stream.flush()
