"""Minitest — a small sequential test runner that checks error chains.

Public surface::

    from minitest import (
        test,
        Registry,
        CheckContext,
        TestRunner,
        run_tests,
        main,
        Expected,
        InterruptTest,
        InternalError,
    )

Write tests as functions taking a ``CheckContext``::

    from minitest import test

    @test
    def rejects_negative(t):
        t.must_raise(
            lambda: load_config({"workers": -1}),
            RuntimeError("invalid config"),
            ValueError("workers must be positive"),
        )

and run them with ``python -m minitest path/to/tests.py``.
"""

from .capture import capture_chain, next_cause
from .chain import (
    ErrorChain,
    ErrorChainElement,
    Expected,
    ExpectedPattern,
    elements_equal,
    split_into_lines,
)
from .checks import CheckContext
from .cli import main
from .comparator import (
    ComparisonVerdict,
    ElementDiff,
    LinePair,
    PresentationMode,
    compare,
)
from .config import RunnerConfig
from .errors import InternalError, InterruptTest
from .protocol import (
    Reporter,
    SuiteReport,
    TestIdentity,
    TestOutcome,
    TestStatus,
    TypeNameResolver,
)
from .registry import Registry, default_registry, test
from .render import render_chain, render_verdict
from .reporter import StreamReporter
from .resolver import QualifiedNameResolver
from .runner import SuiteState, TestRunner, run_tests

__all__ = [
    # Registration and running
    "test",
    "Registry",
    "default_registry",
    "CheckContext",
    "TestRunner",
    "SuiteState",
    "run_tests",
    "main",
    "RunnerConfig",
    # Errors
    "InternalError",
    "InterruptTest",
    # Error chains
    "ErrorChain",
    "ErrorChainElement",
    "Expected",
    "ExpectedPattern",
    "elements_equal",
    "split_into_lines",
    "capture_chain",
    "next_cause",
    # Comparison and rendering
    "compare",
    "ComparisonVerdict",
    "ElementDiff",
    "LinePair",
    "PresentationMode",
    "render_verdict",
    "render_chain",
    # Collaborators
    "TypeNameResolver",
    "QualifiedNameResolver",
    "Reporter",
    "StreamReporter",
    # Results
    "TestIdentity",
    "TestOutcome",
    "TestStatus",
    "SuiteReport",
]
