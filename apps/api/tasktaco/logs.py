from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_configured = False


def configure_logging(level: str = "INFO") -> None:
  """Install one stream handler on the package logger.

  Safe to call more than once; later calls only adjust the level.
  """
  global _configured
  logger = logging.getLogger("tasktaco")
  logger.setLevel(getattr(logging, (level or "INFO").upper(), logging.INFO))
  if _configured:
    return
  handler = logging.StreamHandler()
  handler.setFormatter(logging.Formatter(LOG_FORMAT))
  logger.addHandler(handler)
  _configured = True
