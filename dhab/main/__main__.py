"""
Main module entry point.

``python -m dhab.main`` starts the Celery worker; ``python -m dhab.main api``
serves the HTTP API with uvicorn.
"""

import sys


def run_api() -> None:
    import uvicorn

    from .config import get_settings

    settings = get_settings()
    uvicorn.run(
        "dhab.main.app:app",
        host=settings.service.host,
        port=settings.service.port,
        reload=settings.service.reload,
    )


if __name__ == "__main__":
    if sys.argv[1:2] == ["api"]:
        run_api()
    else:
        from .worker import main

        main()
