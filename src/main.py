"""ASGI entry point for the masterhub identity service.

Exposes ``app`` for ``uvicorn src.main:app`` and can be run directly with
``python -m src.main``, in which case host, port, workers and reload mode
come from settings.
"""

import uvicorn

from src.core.application import create_application
from src.core.config.settings import settings
from src.core.initialization import initialize_application

initialize_application()

app = create_application()


def run() -> None:
    uvicorn.run(
        "src.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        # uvicorn ignores workers when reload is on
        workers=1 if settings.RELOAD else settings.API_WORKERS,
        reload=settings.RELOAD,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
