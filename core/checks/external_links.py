from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Tuple, Union

import requests

logger = logging.getLogger(__name__)


USER_AGENT = "prompt-catalog-link-checker/0.1"

LinkStatus = Union[int, str]


def check_url(url: str, *, timeout: float = 10.0) -> Tuple[str, LinkStatus]:
    """Return (url, status code) or (url, error message).

    Tries HEAD first for speed and falls back to GET for sites that reject HEAD.
    """

    headers = {"User-Agent": USER_AGENT}
    try:
        response = requests.head(url, headers=headers, timeout=timeout, allow_redirects=True)
        if response.status_code >= 400:
            response = requests.get(url, headers=headers, timeout=timeout, allow_redirects=True)
        return url, response.status_code
    except requests.RequestException as e:
        logger.warning("Link check failed for %s: %s", url, e)
        return url, str(e)


def is_broken(status: LinkStatus) -> bool:
    return not isinstance(status, int) or status >= 400


def check_urls(
    urls: Iterable[str],
    *,
    timeout: float = 10.0,
    max_workers: int = 20,
) -> Dict[str, LinkStatus]:
    """Check unique URLs in parallel."""

    unique: List[str] = sorted({u.rstrip(".,") for u in urls if u})
    if not unique:
        return {}

    logger.info("Checking %d unique external links", len(unique))
    with ThreadPoolExecutor(max_workers=max(1, int(max_workers))) as executor:
        results = list(executor.map(lambda u: check_url(u, timeout=timeout), unique))
    return dict(results)
