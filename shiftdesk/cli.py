from __future__ import annotations

import uvicorn

from shiftdesk.settings import get_settings


def main() -> None:
    """Serve the app with uvicorn on the configured host and port."""
    settings = get_settings()
    uvicorn.run("shiftdesk.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
