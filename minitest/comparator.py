"""Compare a captured error chain against an expected pattern."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from itertools import zip_longest

from .chain import (
    ErrorChain,
    ErrorChainElement,
    ExpectedPattern,
    elements_equal,
    split_into_lines,
)


class PresentationMode(enum.Enum):
    """How a mismatch is rendered.

    ``MESSAGE_ONLY`` when counts are equal and every type name matches,
    so only messages differ. ``FULL`` otherwise.
    """

    FULL = "full"
    MESSAGE_ONLY = "message_only"


@dataclass(frozen=True)
class LinePair:
    """One aligned row of message text. ``None`` means that side ran out."""

    actual: str | None
    expected: str | None

    @property
    def matched(self) -> bool:
        return (
            self.actual is not None
            and self.expected is not None
            and self.actual == self.expected
        )


@dataclass(frozen=True)
class ElementDiff:
    """Actual vs expected at one chain index. At most one side is ``None``."""

    index: int
    actual: ErrorChainElement | None
    expected: ErrorChainElement | None
    lines: tuple[LinePair, ...]

    def __post_init__(self) -> None:
        if self.actual is None and self.expected is None:
            raise ValueError("An element diff needs at least one side.")

    @property
    def matched(self) -> bool:
        return (
            self.actual is not None
            and self.expected is not None
            and elements_equal(self.actual, self.expected)
        )

    @property
    def names_match(self) -> bool:
        return (
            self.actual is not None
            and self.expected is not None
            and self.actual.display_name == self.expected.display_name
        )


@dataclass(frozen=True)
class ComparisonVerdict:
    matched: bool
    actual_count: int
    expected_count: int
    element_diffs: tuple[ElementDiff, ...]

    @property
    def mode(self) -> PresentationMode:
        if self.actual_count == self.expected_count and all(
            d.names_match for d in self.element_diffs
        ):
            return PresentationMode.MESSAGE_ONLY
        return PresentationMode.FULL


def align_lines(actual: str | None, expected: str | None) -> tuple[LinePair, ...]:
    """Pair the lines of two messages until both are exhausted.

    The shorter side is padded with ``None``, never with ``""``.
    """
    return tuple(
        LinePair(a, e)
        for a, e in zip_longest(split_into_lines(actual), split_into_lines(expected))
    )


def compare(actual: ErrorChain, expected: ExpectedPattern) -> ComparisonVerdict:
    """Compare *actual* against *expected* index by index.

    An empty pattern matches any chain and produces no element diffs.
    Otherwise the verdict matches iff the lengths agree and every index
    matches.
    """
    actual_count = len(actual)
    expected_count = len(expected)

    if expected_count == 0:
        return ComparisonVerdict(
            matched=True,
            actual_count=actual_count,
            expected_count=0,
            element_diffs=(),
        )

    diffs: list[ElementDiff] = []
    for i in range(max(actual_count, expected_count)):
        a = actual[i] if i < actual_count else None
        e = expected[i] if i < expected_count else None
        diffs.append(
            ElementDiff(
                index=i,
                actual=a,
                expected=e,
                lines=align_lines(
                    a.message if a is not None else None,
                    e.message if e is not None else None,
                ),
            )
        )

    matched = actual_count == expected_count and all(d.matched for d in diffs)
    return ComparisonVerdict(
        matched=matched,
        actual_count=actual_count,
        expected_count=expected_count,
        element_diffs=tuple(diffs),
    )
