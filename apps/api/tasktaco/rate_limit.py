"""Per-IP throttling for the anonymous auth endpoints.

Attempts are remembered in process memory over a sliding one-minute window,
so counts reset on restart and are not shared between workers.
"""

from __future__ import annotations

import math
import time
from collections import deque
from threading import Lock
from typing import Callable

from tasktaco.config import settings

WINDOW_SECONDS = 60


def _limit_for(action: str) -> int:
  if action == "login":
    return int(settings.rate_limit_login_ip_per_minute)
  if action == "register":
    return int(settings.rate_limit_register_ip_per_minute)
  raise ValueError(f"unknown auth action {action!r}")


class AuthThrottle:
  def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
    self._clock = clock
    self._lock = Lock()
    self._attempts: dict[tuple[str, str], deque[float]] = {}

  def attempt(self, action: str, ip: str | None) -> int:
    """Record one attempt; returns 0 if allowed, else seconds to wait."""
    limit = _limit_for(action)
    now = self._clock()
    with self._lock:
      seen = self._attempts.setdefault((action, ip or "unknown"), deque())
      while seen and now - seen[0] >= WINDOW_SECONDS:
        seen.popleft()
      if len(seen) >= limit:
        return max(1, math.ceil(WINDOW_SECONDS - (now - seen[0])))
      seen.append(now)
      return 0

  def clear(self) -> None:
    with self._lock:
      self._attempts.clear()


throttle = AuthThrottle()
