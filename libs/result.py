"""Result type shared by use cases

Use cases never raise for business outcomes. They return a Result that is
either ok (carrying a value) or err (carrying an Error with a stable code).
"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Error:
    code: str
    message: str
    reason: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"code": self.code, "message": self.message}
        if self.reason is not None:
            data["reason"] = self.reason
        return data


class Result(Generic[T]):
    __slots__ = ("_value", "_error")

    def __init__(self, value: Optional[T] = None, error: Optional[Error] = None):
        if value is not None and error is not None:
            raise ValueError("Result cannot carry both a value and an error")
        self._value = value
        self._error = error

    def is_ok(self) -> bool:
        return self._error is None

    def is_err(self) -> bool:
        return self._error is not None

    @property
    def value(self) -> T:
        if self._error is not None:
            raise ValueError(f"Result is an error: {self._error.code}")
        return self._value

    @property
    def error(self) -> Optional[Error]:
        return self._error

    def __repr__(self) -> str:
        if self.is_ok():
            return f"Result.ok({self._value!r})"
        return f"Result.err({self._error!r})"


class Return:
    @staticmethod
    def ok(value: Optional[T] = None) -> Result[T]:
        return Result(value=value)

    @staticmethod
    def err(error: Error) -> Result:
        return Result(error=error)
