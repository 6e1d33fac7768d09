"""Shared HTTP helpers.

Encapsulates request/timeout error handling and DEBUG traces so callers
avoid duplicating try/except blocks.
"""
from __future__ import annotations

import logging
import os
import tempfile
from typing import Any

import requests

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer
from counting.errors import ProvisioningError

logger = logging.getLogger(__name__)


def safe_get(url: str, *, context: str, **kwargs: Any) -> requests.Response:
    """Perform a GET request with consistent error handling and DEBUG traces.

    Raises:
        ProvisioningError: On timeout, connection failure or a non-2xx status.
    """
    safe_target = safe_url(url)
    with Timer() as t:
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP request",
                extra=extra_context(
                    event="http_request",
                    component="http_client",
                    action="GET",
                    target=safe_target,
                    context=context
                )
            )
        try:
            res = requests.get(url, timeout=Constants.REQUEST_TIMEOUT, **kwargs)
        except requests.Timeout as exc:
            logger.error(
                "%s request timed out after %s seconds",
                context,
                Constants.REQUEST_TIMEOUT,
            )
            raise ProvisioningError(f"{context} request timed out: {safe_target}") from exc
        except requests.RequestException as exc:  # includes ConnectionError
            logger.error("%s connection error: %s", context, exc)
            raise ProvisioningError(f"{context} connection error: {safe_target}") from exc

        if is_debug_enabled(logger):
            logger.debug(
                "HTTP response",
                extra=extra_context(
                    event="http_response",
                    component="http_client",
                    action="GET",
                    outcome="success" if res.ok else "http_error",
                    status_code=res.status_code,
                    duration_ms=t.duration_ms(),
                    target=safe_target,
                    context=context
                )
            )
    if not res.ok:
        raise ProvisioningError(f"{context} request failed with HTTP {res.status_code}: {safe_target}")
    return res


def download_file(url: str, dest_path: str, *, context: str) -> str:
    """Download ``url`` to ``dest_path`` atomically and return the path.

    Raises:
        ProvisioningError: If the download fails or cannot be written.
    """
    res = safe_get(url, context=context)
    dest_dir = os.path.dirname(dest_path) or "."
    try:
        os.makedirs(dest_dir, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".download-", dir=dest_dir)
        with os.fdopen(fd, "wb") as fh:
            fh.write(res.content)
        os.replace(tmp_path, dest_path)
    except OSError as exc:
        raise ProvisioningError(f"Unable to write {dest_path}: {exc}") from exc
    logger.debug("Downloaded %s to %s", safe_url(url), dest_path)
    return dest_path
