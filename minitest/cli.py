"""Command-line entry point.

Usage::

    python -m minitest tests/test_parser.py tests/test_lexer.py
    python -m minitest mypackage.selftests --max-chain-depth 32

Each argument is imported so its ``@test`` functions register on the
default registry; then the suite runs and the process exits with its
status (0 passed, 1 failed, 2 internal error).
"""

from __future__ import annotations

import argparse
import importlib
import importlib.util
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from types import ModuleType

from pydantic import ValidationError

from .config import RunnerConfig
from .errors import InternalError
from .registry import default_registry
from .reporter import StreamReporter
from .runner import run_tests

logger = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="minitest",
        description="Run minitest tests defined in the given files or modules.",
    )
    parser.add_argument(
        "paths",
        nargs="+",
        help="Test files (path/to/file.py) or dotted module names to import",
    )
    parser.add_argument(
        "--max-chain-depth",
        type=int,
        default=None,
        help="Deepest error chain captured before aborting (default: 128)",
    )
    parser.add_argument(
        "--stream",
        choices=["stderr", "stdout"],
        default=None,
        help="Where to write the run log (default: stderr)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Diagnostic logging level (default: WARNING)",
    )
    return parser.parse_args(argv)


def load_test_module(target: str) -> ModuleType:
    """Import *target*, a ``.py`` path or a dotted module name.

    Raises ``InternalError`` if the import fails.
    """
    path = Path(target)
    try:
        if path.suffix == ".py" or path.exists():
            module_name = f"_minitest_{path.stem}_{abs(hash(str(path.resolve())))}"
            spec = importlib.util.spec_from_file_location(module_name, path)
            if spec is None or spec.loader is None:
                raise ImportError(f"Can't load tests from `{target}`.")
            module = importlib.util.module_from_spec(spec)
            sys.modules[module_name] = module
            spec.loader.exec_module(module)
            return module
        return importlib.import_module(target)
    except Exception as exc:
        raise InternalError(f"Failed to import `{target}`: {exc}") from exc


def main(argv: Sequence[str] | None = None) -> int:
    """Parse *argv*, import the tests and run them. Returns the exit code."""
    args = parse_args(argv)
    try:
        config = RunnerConfig.from_env(
            max_chain_depth=args.max_chain_depth,
            stream=args.stream,
            log_level=args.log_level,
        )
    except ValidationError as exc:
        sys.stderr.write(f"minitest: Invalid configuration:\n{exc}\n")
        return InternalError.exit_code

    logging.basicConfig(level=config.log_level)
    reporter = StreamReporter(config.output_stream())

    try:
        for target in args.paths:
            load_test_module(target)
            logger.info("Loaded tests from %s", target)
    except InternalError as exc:
        reporter.internal_error(str(exc))
        return exc.exit_code

    return run_tests(default_registry, config=config, reporter=reporter)
