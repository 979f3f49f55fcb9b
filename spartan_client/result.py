"""
Result 型

例外の代わりに成功・失敗をタグ付きの値として返すための型です。
"""

from typing import Callable, Generic, TypeVar, Union
from dataclasses import dataclass

from .exceptions import SpartanError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """成功"""

    value: T

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    """失敗"""

    error: SpartanError

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap(self):
        """保持しているエラーを送出"""
        raise self.error


Result = Union[Ok[T], Err]


def capture(func: Callable[..., T], *args, **kwargs) -> "Result[T]":
    """関数を実行し、SpartanError を Err に変換"""
    try:
        return Ok(func(*args, **kwargs))
    except SpartanError as e:
        return Err(e)
