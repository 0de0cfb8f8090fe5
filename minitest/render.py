"""Plain-text rendering of comparison verdicts and captured chains.

Both renderers are pure: they return lines without a trailing newline and
without the reporter's prefix, and never touch their input.

A full-mode verdict renders like this::

    Caught        | Expected
    ValueError    | ValueError
        bad input #     bad value
    (none)        # KeyError
       .          #     'k'
"""

from __future__ import annotations

from .chain import ErrorChain, ErrorChainElement
from .comparator import ComparisonVerdict, LinePair, PresentationMode

CAUGHT_LABEL = "Caught"
EXPECTED_LABEL = "Expected"
NONE_LABEL = "(none)"
UNKNOWN_LABEL = "(unknown)"

MATCH_SEP = "|"
MISMATCH_SEP = "#"
PRESENT_MARK = " "
MISSING_MARK = "."


def type_cell(element: ErrorChainElement | None) -> str:
    if element is None:
        return NONE_LABEL
    if element.is_unknown:
        return UNKNOWN_LABEL
    return element.display_name


def expected_type_cell(element: ErrorChainElement | None) -> str:
    """Expected elements print their raw name, even an empty one."""
    if element is None:
        return NONE_LABEL
    return element.display_name


def column_width(verdict: ComparisonVerdict, mode: PresentationMode, indent: int) -> int:
    """Width of the left column: the widest label, type name or indented line."""
    width = max(len(CAUGHT_LABEL), len(EXPECTED_LABEL))
    for diff in verdict.element_diffs:
        if mode is PresentationMode.FULL:
            width = max(
                width, len(type_cell(diff.actual)), len(expected_type_cell(diff.expected))
            )
        for pair in diff.lines:
            for line in (pair.actual, pair.expected):
                if line is not None:
                    width = max(width, len(line) + indent)
    return width


def _type_row(diff, width: int) -> str:
    sep = MATCH_SEP if diff.names_match else MISMATCH_SEP
    return f"{type_cell(diff.actual):<{width}} {sep} {expected_type_cell(diff.expected)}"


def _message_row(pair: LinePair, width: int, indent: int) -> str:
    left_mark = PRESENT_MARK if pair.actual is not None else MISSING_MARK
    right_mark = PRESENT_MARK if pair.expected is not None else MISSING_MARK
    sep = MATCH_SEP if pair.matched else MISMATCH_SEP
    left = pair.actual or ""
    right = pair.expected or ""
    return (
        " " * (indent - 1)
        + left_mark
        + f"{left:<{width - indent}}"
        + f" {sep}"
        + " " * indent
        + right_mark
        + right
    )


def render_verdict(
    verdict: ComparisonVerdict,
    mode: PresentationMode | None = None,
    indent: int = 4,
) -> list[str]:
    """Render *verdict* as an aligned two-column table.

    *mode* defaults to ``verdict.mode``. In message-only mode each chain
    index collapses to its message rows.
    """
    if indent < 1:
        raise ValueError("indent must be at least 1")
    if mode is None:
        mode = verdict.mode

    width = column_width(verdict, mode, indent)
    lines = [f"{CAUGHT_LABEL:<{width}} {MATCH_SEP} {EXPECTED_LABEL}"]
    for diff in verdict.element_diffs:
        if mode is PresentationMode.FULL:
            lines.append(_type_row(diff, width))
        lines.extend(_message_row(pair, width, indent) for pair in diff.lines)
    return lines


def render_chain(chain: ErrorChain, indent: int = 4) -> list[str]:
    """Render a captured chain, one block per level, outermost first."""
    lines: list[str] = []
    for element in chain:
        if element.is_unknown:
            lines.append("Unknown exception.")
            continue
        lines.append(element.display_name)
        if element.message is None:
            # Not indented, so it can't be mistaken for a message line.
            lines.append("(null)")
        else:
            lines.extend(" " * indent + line for line in element.message.split("\n"))
    return lines
