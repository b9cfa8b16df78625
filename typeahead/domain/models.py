"""Pydantic models describing what observers of a search pipeline see."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class ErrorInfo(_FrozenModel):
    type: str
    message: str

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ErrorInfo":
        return cls(type=exc.__class__.__name__, message=str(exc))


class EmptyState(_FrozenModel):
    """Seed value published before any lookup settles."""

    kind: Literal["empty"] = "empty"
    items: tuple[str, ...] = ()


class ReadyState(_FrozenModel):
    kind: Literal["ready"] = "ready"
    query: str
    items: tuple[str, ...]


class FailedState(_FrozenModel):
    kind: Literal["failed"] = "failed"
    query: str
    error: ErrorInfo

    @property
    def items(self) -> tuple[str, ...]:
        return ()


ResultState = Annotated[
    Union[EmptyState, ReadyState, FailedState],
    Field(discriminator="kind"),
]


__all__ = [
    "EmptyState",
    "ErrorInfo",
    "FailedState",
    "ReadyState",
    "ResultState",
]
