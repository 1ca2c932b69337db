"""Tagged success/failure values returned by pipeline stages."""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful stage outcome."""

    value: T


@dataclass(frozen=True)
class Err(Generic[E]):
    """Failed stage outcome."""

    error: E


Result = Union[Ok[T], Err[E]]
