"""Resolve ``*_FILE`` environment variables into their plain counterparts.

Credentials such as ``GOLDAPI_API_KEY`` or ``INGEST_CRON_SECRET`` are usually
mounted as Docker secrets. Setting ``GOLDAPI_API_KEY_FILE=/run/secrets/goldapi``
exposes the file content as ``GOLDAPI_API_KEY`` unless that variable is
already set.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

SECRET_FILE_SUFFIX = "_FILE"


def _read_secret(key: str, file_path: str) -> Optional[str]:
    try:
        return Path(file_path).read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning(
            "env.secret_file.unreadable",
            extra={"key": key, "path": file_path, "error": str(exc)},
        )
        return None


def load_secret_file_variables() -> None:
    """Populate ``KEY`` from ``KEY_FILE`` for every unset secret variable."""

    for key, file_path in list(os.environ.items()):
        if not key.endswith(SECRET_FILE_SUFFIX) or not file_path:
            continue
        target_key = key[: -len(SECRET_FILE_SUFFIX)]
        if os.environ.get(target_key):
            continue
        value = _read_secret(key, file_path)
        if value is not None:
            os.environ[target_key] = value


load_secret_file_variables()
