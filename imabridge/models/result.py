"""
Three-state result for values that come from slow remote calls
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

T = TypeVar('T')


class RemoteStatus(Enum):
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Remote(Generic[T]):
    """Pending | Ok(value) | Err(error)"""
    status: RemoteStatus
    value: Optional[T] = None
    error: Optional[str] = None

    @classmethod
    def pending(cls) -> "Remote[Any]":
        return cls(RemoteStatus.LOADING)

    @classmethod
    def ok(cls, value: T) -> "Remote[T]":
        return cls(RemoteStatus.SUCCESS, value=value)

    @classmethod
    def err(cls, error: str) -> "Remote[Any]":
        return cls(RemoteStatus.ERROR, error=error)

    @property
    def is_loading(self) -> bool:
        return self.status is RemoteStatus.LOADING

    @property
    def is_success(self) -> bool:
        return self.status is RemoteStatus.SUCCESS

    @property
    def is_error(self) -> bool:
        return self.status is RemoteStatus.ERROR
