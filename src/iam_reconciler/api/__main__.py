"""
iam_reconciler.api.__main__

`python -m iam_reconciler.api` (or the `iam-reconciler` script): serve the API with uvicorn.
"""

from __future__ import annotations

import uvicorn

from iam_reconciler.api.app import create_app
from iam_reconciler.settings import get_settings


def main() -> None:
    settings = get_settings()

    # Logging is configured by create_app; uvicorn must not install its own handlers.
    uvicorn.run(
        create_app(settings=settings),
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,
        log_level=settings.log_level.lower(),
        access_log=settings.env != "prod",
    )


if __name__ == "__main__":
    main()
