"""CheckContext — the handle every test receives, and the checks it runs.

A test function takes a single argument::

    @test
    def parses_numbers(t):
        t.check(lambda: parse("1") == 1)
        t.check_soft(lambda: parse(" 1 ") == 1)
        t.must_raise(lambda: parse("x"), ValueError("not a number: 'x'"))

Hard checks (``check``, ``must_raise``) stop the test on failure; soft ones
(``check_soft``, ``must_raise_soft``) record the failure and let the test
carry on. Either way the test is reported as failed when it ends.
"""

from __future__ import annotations

import ast
import linecache
import logging
import sys
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from .capture import capture_chain
from .chain import ErrorChain, ExpectedPattern
from .comparator import compare
from .config import RunnerConfig
from .errors import PASSTHROUGH, InternalError, InterruptTest
from .protocol import Reporter, TestOutcome, TypeNameResolver
from .render import render_chain, render_verdict
from .resolver import QualifiedNameResolver

logger = logging.getLogger(__name__)

_CHECK_METHODS = frozenset({"check", "check_soft", "must_raise", "must_raise_soft"})


# ---------------------------------------------------------------------------
# Call-site introspection
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CallSite:
    file: str
    line: int
    source: str

    def __str__(self) -> str:
        return f"{self.file}:{self.line}"


def _call_site(depth: int) -> CallSite:
    """Location of the frame *depth* levels above the caller."""
    frame = sys._getframe(depth + 1)
    file = frame.f_code.co_filename
    line = frame.f_lineno
    return CallSite(file=file, line=line, source=linecache.getline(file, line).strip())


def expression_text(source: str) -> str:
    """Best-effort text of the checked expression from a source line.

    ``t.check(lambda: a == b)`` gives ``a == b``; ``t.check(flag)`` gives
    ``flag``. Lines that don't parse on their own (a call split over several
    lines, an ``if`` header) come back unchanged.
    """
    try:
        tree = ast.parse(source)
    except SyntaxError:
        return source

    for node in ast.walk(tree):
        if not (
            isinstance(node, ast.Call)
            and isinstance(node.func, ast.Attribute)
            and node.func.attr in _CHECK_METHODS
            and node.args
        ):
            continue
        arg = node.args[0]
        if isinstance(arg, ast.Lambda):
            arg = arg.body
        return ast.get_source_segment(source, arg) or source
    return source


# ---------------------------------------------------------------------------
# CheckContext
# ---------------------------------------------------------------------------


class CheckContext:
    """Failure state of the running test plus the checks that update it.

    The runner binds a ``TestOutcome`` for the duration of one test with
    :meth:`bind`; the binding is released on every exit path. Checks made
    while nothing is bound raise ``InternalError``.
    """

    def __init__(
        self,
        reporter: Reporter,
        resolver: TypeNameResolver | None = None,
        config: RunnerConfig | None = None,
    ) -> None:
        self._reporter = reporter
        self._resolver = resolver or QualifiedNameResolver()
        self._config = config or RunnerConfig()
        self._outcome: TestOutcome | None = None

    # ------------------------------------------------------------------
    # Binding
    # ------------------------------------------------------------------

    @contextmanager
    def bind(self, outcome: TestOutcome) -> Iterator["CheckContext"]:
        if self._outcome is not None:
            raise InternalError("A test started while another one was running.")
        self._outcome = outcome
        try:
            yield self
        finally:
            self._outcome = None

    def _require_running(self) -> TestOutcome:
        if self._outcome is None:
            raise InternalError("A check was used outside of a running test.")
        return self._outcome

    @property
    def outcome(self) -> TestOutcome:
        return self._require_running()

    @property
    def failed(self) -> bool:
        """Whether the running test has recorded a failure so far."""
        return self._require_running().failed

    # ------------------------------------------------------------------
    # Public checks
    # ------------------------------------------------------------------

    def check(self, probe: Any, *, expr: str | None = None) -> bool:
        """Fail and stop the test unless *probe* is truthy.

        *probe* is a zero-argument callable (preferred, so errors it raises
        are reported) or a plain value. Returns the boolean result.
        """
        return self._assert(True, probe, expr, _call_site(1))

    def check_soft(self, probe: Any, *, expr: str | None = None) -> bool:
        """Like :meth:`check`, but the test keeps running after a failure."""
        return self._assert(False, probe, expr, _call_site(1))

    def must_raise(
        self, body: Callable[[], Any], *expected: Any, expr: str | None = None
    ) -> bool:
        """Fail and stop the test unless *body* raises.

        With *expected* items, the raised error chain must also match them,
        outermost first: ``must_raise(f, RuntimeError("outer"),
        ValueError("inner"))`` expects ``RuntimeError("outer")`` raised from
        ``ValueError("inner")``. Without them any error passes.
        """
        return self._must_raise(True, body, expected, expr, _call_site(1))

    def must_raise_soft(
        self, body: Callable[[], Any], *expected: Any, expr: str | None = None
    ) -> bool:
        """Like :meth:`must_raise`, but the test keeps running after a failure."""
        return self._must_raise(False, body, expected, expr, _call_site(1))

    # ------------------------------------------------------------------
    # Failure recording
    # ------------------------------------------------------------------

    def _fail(self, lines: list[str]) -> None:
        outcome = self._require_running()
        self._reporter.flush_user_output()
        outcome.mark_failed()
        for line in lines:
            self._reporter.detail(line)

    def _capture(self, exc: BaseException) -> ErrorChain:
        return capture_chain(exc, self._resolver, self._config.max_chain_depth)

    def _chain_lines(self, chain: ErrorChain, prefix: str) -> list[str]:
        return [prefix + line for line in render_chain(chain, self._config.message_indent)]

    def record_uncaught(self, exc: BaseException) -> None:
        """Fail the running test for *exc* escaping its body."""
        chain = self._capture(exc)
        self._fail(["    Uncaught exception:"] + self._chain_lines(chain, " " * 8))

    # ------------------------------------------------------------------
    # Check implementations
    # ------------------------------------------------------------------

    def _assert(self, stop_on_failure: bool, probe: Any, expr: str | None, site: CallSite) -> bool:
        self._require_running()

        chain: ErrorChain | None = None
        try:
            result = bool(probe() if callable(probe) else probe)
        except (InterruptTest, *PASSTHROUGH):
            raise
        except BaseException as exc:  # noqa: BLE001
            result = False
            chain = self._capture(exc)

        if result:
            return True

        lines = [
            f"    Assertion failed at:  {site}",
            f"        Expression:  {expr if expr is not None else expression_text(site.source)}",
        ]
        if chain is not None:
            lines.append("        Threw an uncaught exception:")
            lines.extend(self._chain_lines(chain, " " * 12))
        else:
            lines.append("        Evaluated to false.")
        self._fail(lines)

        if stop_on_failure:
            raise InterruptTest()
        return False

    def _must_raise(
        self,
        stop_on_failure: bool,
        body: Callable[[], Any],
        expected_items: tuple,
        expr: str | None,
        site: CallSite,
    ) -> bool:
        self._require_running()
        pattern = ExpectedPattern.build(expected_items, self._resolver)
        expression = expr if expr is not None else expression_text(site.source)

        raised: BaseException | None = None
        try:
            body()
        except InterruptTest:
            # A hard check inside the body stopped it. That isn't an error
            # the body raised, so the check sees a body that completed.
            logger.debug("Interrupt inside must_raise body at %s", site)
        except PASSTHROUGH:
            raise
        except BaseException as exc:  # noqa: BLE001
            raised = exc

        if raised is None:
            self._fail([
                f"    Missing exception at:  {site}",
                f"        Expression:  {expression}",
            ])
        else:
            verdict = compare(self._capture(raised), pattern)
            if verdict.matched:
                return True
            table = render_verdict(verdict, indent=self._config.message_indent)
            self._fail(
                [
                    f"    Incorrect exception at:  {site}",
                    f"        Expression:  {expression}",
                    "    Exception:",
                ]
                + [" " * 8 + line for line in table]
            )

        if stop_on_failure:
            raise InterruptTest()
        return False
