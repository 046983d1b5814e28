"""
HTTP entry point for the Chamaa Ledger.

Run with:
    uvicorn app.main:app
or:
    python -m app.main
"""

import uvicorn

from chamaa.api import create_app
from chamaa.audit import configure_logging
from chamaa.config import get_settings


settings = get_settings().app
configure_logging(settings.log_level)

app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug_mode,
    )
