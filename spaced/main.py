"""
Spaced learning backend - main entry point.

Runs the API with uvicorn using the configured host, port and log level:

    spaced                       # installed console script
    python -m spaced.main
"""

from __future__ import annotations

import uvicorn

from spaced.config import get_settings


def main():
    """Main entry point."""
    settings = get_settings()
    uvicorn.run(
        "spaced.api.app:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
