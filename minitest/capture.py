"""Turn a raised exception into an outer-to-inner ``ErrorChain``."""

from __future__ import annotations

import logging

from .chain import ErrorChain, ErrorChainElement
from .errors import InternalError
from .protocol import TypeNameResolver

logger = logging.getLogger(__name__)

DEFAULT_MAX_CHAIN_DEPTH = 128


def next_cause(exc: BaseException) -> BaseException | None:
    """Return the error *exc* was explicitly raised from, if any.

    Only ``__cause__`` (``raise ... from ...``) counts. The implicit
    ``__context__`` records whatever was being handled when *exc* was
    raised, which isn't part of the failure, so it is never followed.
    """
    return exc.__cause__


def _message_of(exc: BaseException) -> str:
    try:
        return str(exc)
    except Exception:
        return f"<unprintable {type(exc).__name__} object>"


def capture_chain(
    exc: BaseException,
    resolver: TypeNameResolver,
    max_depth: int = DEFAULT_MAX_CHAIN_DEPTH,
) -> ErrorChain:
    """Walk *exc* and its causes, outermost first.

    - An ``Exception`` contributes its resolved type name and ``str()``.
      If the resolver can't name the type, an "unknown" element is recorded
      and the walk continues to the cause.
    - Any other raised value (a bare ``BaseException`` subclass) is foreign:
      one "unknown" element is recorded and the walk stops.

    Raises ``InternalError`` when the chain is longer than *max_depth*,
    which also guards against cyclic ``__cause__`` links.
    """
    elements: list[ErrorChainElement] = []
    current: BaseException | None = exc

    while current is not None:
        if len(elements) == max_depth:
            raise InternalError(
                f"Error chain too deep: more than {max_depth} nested errors."
            )

        error_type = type(current)
        if not isinstance(current, Exception):
            elements.append(ErrorChainElement.unknown(error_type))
            break

        name = resolver.resolve(error_type)
        if name is None:
            elements.append(ErrorChainElement.unknown(error_type))
        else:
            elements.append(
                ErrorChainElement(
                    type_tag=error_type,
                    display_name=name,
                    message=_message_of(current),
                )
            )
        current = next_cause(current)

    logger.debug("Captured error chain of depth %d", len(elements))
    return ErrorChain(tuple(elements))
