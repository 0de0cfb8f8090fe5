"""Minitest error types."""

from __future__ import annotations


class InternalError(BaseException):
    """Fatal framework error. The run stops and the process exits with code 2.

    Raised for an empty registry, a duplicate test identity, or an error
    chain deeper than the configured limit.

    Not an ``Exception`` subclass, so ``except Exception`` in test code
    can't swallow it.
    """

    exit_code = 2


class InterruptTest(BaseException):
    """Stops the current test early. Doesn't affect the pass/fail status.

    Hard checks raise this after recording their failure; the runner
    swallows it at the test boundary. Don't catch it in test code.
    """


# Signals that propagate through every catch site in the framework.
PASSTHROUGH = (InternalError, KeyboardInterrupt, SystemExit)
