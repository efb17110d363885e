"""Run the addon repository server.

    PORT=8080 CONFIG_PATH=config.yaml python -m gateway
"""

import sys

import uvicorn

from gateway.core.config import get_settings


def main() -> int:
    """Start uvicorn, refusing to start without a listen port."""
    settings = get_settings()
    if settings.port is None:
        print("Error: PORT is not set; refusing to start", file=sys.stderr)
        return 2

    print(f"listening on {settings.host}:{settings.port}...")
    uvicorn.run(
        "gateway.api.main:app",
        host=settings.host,
        port=settings.port,
        log_level="debug" if settings.debug else "info",
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
