"""
Koalab Backend: Command-line Entrypoint
========================================

Usage:
    python -m koalab        (or the `koalab` console script)

Bind address, public URL and store location come from the environment
(BACKEND_HOST, BACKEND_PORT, PUBLIC_URL, DB_HOST, DB_NAME, ...).
"""

import uvicorn

from koalab.config import Settings


def main() -> None:
    settings = Settings()
    uvicorn.run(
        "koalab.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
