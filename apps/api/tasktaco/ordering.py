"""Dense zero-based ordering for sibling groups.

Columns of one board and tasks of one column each form a sibling group whose
``order`` values must always be exactly ``0..n-1``. Every mutation goes
through the helpers below: splice an item into a position and renumber the
whole list, or compact the tail after a removal.
"""

from __future__ import annotations

from typing import Iterable, Protocol, Sequence, TypeVar


class Ordered(Protocol):
  order: int


T = TypeVar("T", bound=Ordered)


def clamp_position(target: int, size: int) -> int:
  return min(max(int(target), 0), size)


def splice(siblings: Sequence[T], item: T, target: int) -> list[T]:
  """Return a new list with ``item`` placed at ``target``.

  ``item`` is dropped from ``siblings`` first if present, so the same call
  covers insert and move. Negative targets land at the front and targets past
  the end append.
  """
  arr = [x for x in siblings if x is not item]
  arr.insert(clamp_position(target, len(arr)), item)
  return arr


def renumber(items: Iterable[T]) -> list[T]:
  """Assign ``order = position``; returns the items whose order changed."""
  changed: list[T] = []
  for idx, x in enumerate(items):
    if x.order != idx:
      x.order = idx
      changed.append(x)
  return changed


def compact_after(siblings: Iterable[T], removed_order: int) -> list[T]:
  """Shift every sibling ordered after ``removed_order`` down by one."""
  changed: list[T] = []
  for x in siblings:
    if x.order > removed_order:
      x.order -= 1
      changed.append(x)
  return changed


def is_dense(orders: Iterable[int]) -> bool:
  vals = sorted(orders)
  return vals == list(range(len(vals)))
