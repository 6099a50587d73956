from __future__ import annotations

import logging


def configure_app_logging(level: str = "INFO") -> None:
    """
    Minimal logging configuration for this repo.

    Notes:
    - stdlib logging only; uvicorn already installs handlers, so this only sets levels.
    - Set `SHIFTDESK_LOG_LEVEL=DEBUG` (or INFO/WARNING/ERROR) to control verbosity.
    - Per-decision authorization logging is separate and sampled, see
      `shiftdesk.security.diagnostics`.
    """

    normalized = level.upper()
    logging.getLogger("shiftdesk").setLevel(normalized)
    logging.getLogger("shiftdesk").propagate = True
