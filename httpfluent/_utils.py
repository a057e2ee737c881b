from __future__ import annotations

import typing

from ._exceptions import InvalidArgumentError

T = typing.TypeVar("T")


def require(value: T | None, argument: str) -> T:
    if value is None:
        raise InvalidArgumentError(f"{argument!r} must not be None.", argument=argument)
    return value


def require_text(value: str | None, argument: str) -> str:
    if value is None or not str(value).strip():
        raise InvalidArgumentError(
            f"{argument!r} must not be None, empty or whitespace.", argument=argument
        )
    return value
