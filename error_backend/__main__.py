"""Run the backend under uvicorn: ``python -m error_backend``."""
from __future__ import annotations

import uvicorn

from .config import load_settings


def main() -> None:
    settings = load_settings()
    # Import string, so the only app built is the module-level one in main.py.
    # log_config=None keeps the JSON handler installed by setup_logging().
    uvicorn.run(
        "error_backend.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
