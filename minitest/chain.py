"""Value types for captured error chains and expected patterns."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any

from .protocol import TypeNameResolver


@dataclass(frozen=True)
class ErrorChainElement:
    """One level of an error chain.

    ``message is None`` means the message is absent, which is not the same
    as an empty message. The "unknown" sentinel has an empty
    ``display_name`` and no message.
    """

    type_tag: Any
    display_name: str
    message: str | None

    @classmethod
    def unknown(cls, type_tag: Any = None) -> "ErrorChainElement":
        return cls(type_tag=type_tag, display_name="", message=None)

    @property
    def is_unknown(self) -> bool:
        return not self.display_name


def elements_equal(a: ErrorChainElement, b: ErrorChainElement) -> bool:
    """Equal iff display names and messages are equal (``None`` != ``""``)."""
    return a.display_name == b.display_name and a.message == b.message


def split_into_lines(message: str | None) -> list[str]:
    """Split *message* on newlines. An absent message has zero lines."""
    if message is None:
        return []
    return message.split("\n")


@dataclass(frozen=True)
class ErrorChain:
    """Outer-to-inner sequence of causally linked errors. Never empty."""

    elements: tuple[ErrorChainElement, ...]

    def __post_init__(self) -> None:
        if not isinstance(self.elements, tuple):
            object.__setattr__(self, "elements", tuple(self.elements))
        if not self.elements:
            raise ValueError("An error chain needs at least one element.")

    def __len__(self) -> int:
        return len(self.elements)

    def __iter__(self) -> Iterator[ErrorChainElement]:
        return iter(self.elements)

    def __getitem__(self, index: int) -> ErrorChainElement:
        return self.elements[index]

    @property
    def outermost(self) -> ErrorChainElement:
        return self.elements[0]

    @property
    def root(self) -> ErrorChainElement:
        return self.elements[-1]


@dataclass(frozen=True)
class Expected:
    """One author-declared level of an expected chain.

    ``error_type`` is an exception class or a display name string.
    """

    error_type: Any
    message: str = ""


@dataclass(frozen=True)
class ExpectedPattern:
    """Outer-to-inner sequence of expected chain elements.

    An empty pattern accepts any error chain.
    """

    elements: tuple[ErrorChainElement, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.elements, tuple):
            object.__setattr__(self, "elements", tuple(self.elements))

    def __len__(self) -> int:
        return len(self.elements)

    def __iter__(self) -> Iterator[ErrorChainElement]:
        return iter(self.elements)

    def __getitem__(self, index: int) -> ErrorChainElement:
        return self.elements[index]

    @classmethod
    def from_chain(cls, chain: ErrorChain) -> "ExpectedPattern":
        """Pattern that matches *chain* exactly."""
        return cls(tuple(chain))

    @classmethod
    def build(
        cls, items: Iterable[Any], resolver: TypeNameResolver
    ) -> "ExpectedPattern":
        """Normalize author-supplied items into a pattern.

        Each item is one of:

        - an exception instance: ``ValueError("bad")``;
        - an ``Expected`` record: ``Expected(ValueError, "bad")``;
        - a ``(type_or_name, message)`` tuple;
        - an ``ErrorChainElement``, used as is.
        """
        return cls(tuple(_to_element(item, resolver) for item in items))


def _to_element(item: Any, resolver: TypeNameResolver) -> ErrorChainElement:
    if isinstance(item, ErrorChainElement):
        return item
    if isinstance(item, BaseException):
        return _named(type(item), str(item), resolver)
    if isinstance(item, Expected):
        return _named(item.error_type, item.message, resolver)
    if isinstance(item, tuple) and len(item) == 2:
        return _named(item[0], item[1], resolver)
    raise TypeError(
        f"Can't use {item!r} as an expected error. Pass an exception "
        f"instance, an Expected(...) or a (type, message) tuple."
    )


def _named(error_type: Any, message: Any, resolver: TypeNameResolver) -> ErrorChainElement:
    if not isinstance(message, str):
        raise TypeError(
            f"Expected error message must be a str, got {type(message).__name__}."
        )
    if isinstance(error_type, str):
        return ErrorChainElement(type_tag=None, display_name=error_type, message=message)
    name = resolver.resolve(error_type)
    if name is None:
        raise ValueError(f"Can't resolve a name for expected error type {error_type!r}.")
    return ErrorChainElement(type_tag=error_type, display_name=name, message=message)
