"""``env:`` handler with type filters.

``env:NAME`` returns ``os.environ["NAME"]`` (None when unset). A trailing
filter converts the raw value:

- ``env:PORT|d``: int (None when unset)
- ``env:DEBUG|b``: False when unset, ``""``, ``"false"`` or ``"0"``; else True
- ``env:QUIET|!b``: the negation of ``|b``
"""

import os
from collections.abc import Callable
from typing import Any

from protocall.handler import Transform

FALSY_VALUES: frozenset[str] = frozenset({"", "false", "0"})


def _truthy(value: str | None) -> bool:
    return value is not None and value not in FALSY_VALUES


def _integer(value: str | None) -> int | None:
    # int() raises ValueError for non-integers, which fails the resolution
    return None if value is None else int(value, 10)


FILTERS: dict[str, Callable[[str | None], Any]] = {
    "d": _integer,
    "b": _truthy,
    "!b": lambda value: not _truthy(value),
}


def env() -> Transform:
    """Create the ``env:`` handler."""

    def env_handler(value: str) -> Any:
        for name, convert in FILTERS.items():
            marker = f"|{name}"
            if value.endswith(marker):
                return convert(os.environ.get(value[: -len(marker)]))
        return os.environ.get(value)

    return Transform(env_handler)
