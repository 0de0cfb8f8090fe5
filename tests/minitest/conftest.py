"""Shared fixtures and reusable helpers for minitest tests.

Reporters write to ``io.StringIO`` and never flush the real stdout/stderr,
so pytest's capture is left alone.
"""

from __future__ import annotations

import io

import pytest

from minitest import (
    CheckContext,
    ErrorChain,
    ErrorChainElement,
    QualifiedNameResolver,
    Registry,
    StreamReporter,
    TestIdentity,
    TestOutcome,
    default_registry,
)

# ---------------------------------------------------------------------------
# Helper error types and builders
# ---------------------------------------------------------------------------


class Foreign(BaseException):
    """A raised value that isn't an Exception, so it can't be introspected."""


class Unprintable(Exception):
    def __str__(self) -> str:
        raise RuntimeError("no str for you")


class NoNameResolver:
    """Resolver that can't name anything."""

    def resolve(self, type_tag):
        return None


class CountingResolver(QualifiedNameResolver):
    """QualifiedNameResolver that counts lookups."""

    def __init__(self):
        super().__init__()
        self.lookups = 0

    def _lookup(self, type_tag):
        self.lookups += 1
        return super()._lookup(type_tag)


def link(*errors: BaseException) -> BaseException:
    """Chain *errors* outer to inner via ``__cause__``; return the outermost."""
    for outer, inner in zip(errors, errors[1:]):
        outer.__cause__ = inner
    return errors[0]


def raised(error: BaseException) -> BaseException:
    """Raise and catch *error* so it carries a traceback, then return it."""
    try:
        raise error
    except BaseException as exc:  # noqa: BLE001
        return exc


def element(name: str, message: str | None) -> ErrorChainElement:
    return ErrorChainElement(type_tag=None, display_name=name, message=message)


def chain_of(*pairs: tuple) -> ErrorChain:
    """ErrorChain from ``(display_name, message)`` pairs."""
    return ErrorChain(tuple(element(name, message) for name, message in pairs))


class RecordingReporter(StreamReporter):
    """StreamReporter over a StringIO that also counts user-output flushes."""

    def __init__(self):
        self.buffer = io.StringIO()
        super().__init__(self.buffer, user_streams=())
        self.flushes = 0

    def flush_user_output(self) -> None:
        self.flushes += 1
        super().flush_user_output()

    @property
    def text(self) -> str:
        return self.buffer.getvalue()

    @property
    def lines(self) -> list[str]:
        return self.text.splitlines()

    def details(self) -> list[str]:
        """Detail lines with the counter prefix stripped."""
        marker = " [   .    ] "
        return [line.split(marker, 1)[1] for line in self.lines if marker in line]


# ---------------------------------------------------------------------------
# Pytest fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def resolver():
    return QualifiedNameResolver()


@pytest.fixture
def reporter():
    return RecordingReporter()


@pytest.fixture
def registry():
    return Registry()


@pytest.fixture
def outcome():
    return TestOutcome(identity=TestIdentity(file="suite.py", line=1, name="sample"))


@pytest.fixture
def ctx(reporter, resolver, outcome):
    """A CheckContext bound to a running test."""
    context = CheckContext(reporter, resolver)
    outcome.start()
    with context.bind(outcome):
        yield context


@pytest.fixture
def clean_default_registry():
    """Empty the module-level registry for one test, then restore it."""
    saved = default_registry.entries
    default_registry.clear()
    yield default_registry
    default_registry.clear()
    for entry in saved:
        default_registry.add(entry.func, name=entry.identity.name)
