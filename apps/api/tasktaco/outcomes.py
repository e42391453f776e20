from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from fastapi import HTTPException, status

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
  value: T


@dataclass(frozen=True)
class NotFound:
  entity: str

  @property
  def detail(self) -> str:
    return f"{self.entity} not found"


@dataclass(frozen=True)
class Conflict:
  reason: str


Outcome = Union[Ok[T], NotFound, Conflict]


def unwrap(outcome: Outcome[T]) -> T:
  """Return the value of an ``Ok`` or raise the matching HTTP error."""
  if isinstance(outcome, Ok):
    return outcome.value
  if isinstance(outcome, NotFound):
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=outcome.detail)
  raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=outcome.reason)
