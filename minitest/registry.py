"""Test registration."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, overload

from .protocol import TestIdentity

logger = logging.getLogger(__name__)

TestFunc = Callable[[Any], Any]


@dataclass(frozen=True)
class TestEntry:
    __test__ = False

    identity: TestIdentity
    func: TestFunc


class Registry:
    """Collects test functions as they are defined.

    Registration only appends; duplicates are detected when a run starts,
    so every offending definition is seen first. The runner takes a
    snapshot of :attr:`entries` and never writes back.
    """

    def __init__(self) -> None:
        self._entries: list[TestEntry] = []

    @property
    def entries(self) -> tuple[TestEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, func: TestFunc, *, name: str | None = None) -> TestEntry:
        if inspect.iscoroutinefunction(func):
            raise TypeError(
                f"Test `{name or func.__name__}` is a coroutine function; "
                "minitest runs tests synchronously."
            )
        code = func.__code__
        identity = TestIdentity(
            file=code.co_filename,
            line=code.co_firstlineno,
            name=name or func.__name__,
        )
        entry = TestEntry(identity=identity, func=func)
        self._entries.append(entry)
        logger.debug("Registered test %s at %s", identity.name, identity.location)
        return entry

    @overload
    def test(self, func: TestFunc) -> TestFunc: ...

    @overload
    def test(self, *, name: str | None = None) -> Callable[[TestFunc], TestFunc]: ...

    def test(self, func: TestFunc | None = None, *, name: str | None = None):
        """Register a test. Usable bare (``@test``) or as ``@test(name="...")``.

        The function is returned unchanged.
        """
        def decorator(f: TestFunc) -> TestFunc:
            self.add(f, name=name)
            return f

        if func is not None:
            return decorator(func)
        return decorator

    def clear(self) -> None:
        self._entries.clear()


default_registry = Registry()


def test(func: TestFunc | None = None, *, name: str | None = None):
    """Register a test on the default registry. See :meth:`Registry.test`."""
    return default_registry.test(func, name=name)


# Keep pytest from collecting the decorator when it is imported into a test module.
test.__test__ = False  # type: ignore[attr-defined]
