"""Runner configuration."""

from __future__ import annotations

import logging
import os
import sys
from typing import Literal, Mapping, TextIO

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

ENV_PREFIX = "MINITEST_"


class RunnerConfig(BaseModel):
    """Knobs for a test run.

    Values come from keyword arguments, or from ``MINITEST_*`` environment
    variables (and a ``.env`` file) via :meth:`from_env`.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_chain_depth: int = Field(
        default=128, ge=1, description="Deepest error chain captured before aborting the run"
    )
    message_indent: int = Field(
        default=4, ge=1, description="Indentation of message lines in error reports"
    )
    stream: Literal["stderr", "stdout"] = Field(
        default="stderr", description="Stream the run log is written to"
    )
    log_level: str = Field(
        default="WARNING", description="Level for the framework's diagnostic logging"
    )

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {value!r}")
        return level

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        dotenv: bool = True,
        **overrides: object,
    ) -> "RunnerConfig":
        """Build a config from ``MINITEST_<FIELD>`` variables.

        ``.env`` (searched from the working directory up) is loaded first
        unless *dotenv* is false; existing environment variables win over
        it. Keyword *overrides* that are not ``None`` win over both. Raises
        ``pydantic.ValidationError`` on bad values.
        """
        if environ is None:
            if dotenv:
                load_dotenv(find_dotenv(usecwd=True))
            environ = os.environ

        values: dict[str, object] = {}
        for name in cls.model_fields:
            raw = environ.get(ENV_PREFIX + name.upper())
            if raw is not None:
                values[name] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})

        config = cls.model_validate(values)
        logger.debug("Loaded runner config: %s", config)
        return config

    def output_stream(self) -> TextIO:
        return sys.stdout if self.stream == "stdout" else sys.stderr
