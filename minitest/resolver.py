"""Default type-name resolver."""

from __future__ import annotations

import builtins
import logging
from typing import Any

logger = logging.getLogger(__name__)


class QualifiedNameResolver:
    """Names classes by ``module.qualname``; builtins by bare name.

    ``ValueError`` resolves to ``"ValueError"``, ``json.JSONDecodeError`` to
    ``"json.decoder.JSONDecodeError"``. Anything without a ``__qualname__``
    is unresolvable. Resolved names are cached per type.
    """

    def __init__(self) -> None:
        self._cache: dict[Any, str | None] = {}

    def resolve(self, type_tag: Any) -> str | None:
        try:
            return self._cache[type_tag]
        except KeyError:
            pass
        except TypeError:
            # Unhashable tag, resolve without caching.
            return self._lookup(type_tag)

        name = self._lookup(type_tag)
        self._cache[type_tag] = name
        return name

    @staticmethod
    def _lookup(type_tag: Any) -> str | None:
        qualname = getattr(type_tag, "__qualname__", None)
        if not isinstance(qualname, str) or not qualname:
            logger.debug("Can't resolve a type name for %r", type_tag)
            return None
        module = getattr(type_tag, "__module__", None)
        if not module or module == builtins.__name__:
            return qualname
        return f"{module}.{qualname}"
