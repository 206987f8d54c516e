"""
Disregarded - main entry point.

Runs the API under uvicorn using settings from the environment.
Exits immediately if the configuration is invalid (e.g. no JWT_SECRET).
"""

from __future__ import annotations

import logging
import sys

import uvicorn
from pydantic import ValidationError

from disregarded.api.app import create_app
from disregarded.config import get_settings

logger = logging.getLogger(__name__)


def main():
    """Main entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    
    try:
        settings = get_settings()
    except ValidationError as e:
        fields = ", ".join(str(err["loc"][0]).upper() for err in e.errors() if err.get("loc"))
        logger.critical(f"FATAL: invalid configuration ({fields})")
        sys.exit(1)
    
    logging.getLogger().setLevel(settings.log_level.upper())
    
    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
