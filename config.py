from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel


DEFAULT_CONFIG_PATH = "prompt-catalog.yaml"


class AppConfig(BaseModel):
    debug_level: str = "INFO"

    # Root directory of the instruction-file corpus.
    docs_root: str = "./"

    # Files with these suffixes are loaded as documents.
    document_extensions: List[str] = [".md"]

    # Extra directory names skipped while scanning (on top of .git, venvs, caches).
    exclude_dirs: List[str] = []

    # File names (fnmatch patterns) treated as index files.
    # A document can also declare `kind: index` in its front matter.
    index_file_patterns: List[str] = ["INDEX.md", "index.md", "*-index.md", "*_INDEX.md"]

    # README holding the declared directory tree, relative to docs_root.
    readme_file: str = "README.md"

    # Default number of documents returned by a task lookup.
    lookup_limit: int = 5

    # External link checking (HEAD, then GET fallback).
    # Disabled by default: it performs outbound HTTP requests.
    check_external_links: bool = False
    external_link_timeout: float = 10.0
    external_link_workers: int = 20

    # FastAPI / Uvicorn
    api_port: int = 8000

    # CORS
    # If True, enables permissive CORS headers for browser clients (dev-friendly).
    cors_enabled: bool = False

    # SSL / TLS
    # Path to a PEM file containing root CA certificates to trust for outbound HTTPS.
    ssl_ca_file: Optional[str] = None

    # Outbound network proxy settings (used by the external link checker).
    http_proxy: Optional[str] = None
    https_proxy: Optional[str] = None
    no_proxy: Optional[str] = None


def apply_config_to_env(config: AppConfig) -> None:
    """Apply outbound network settings to environment variables if not already set.

    `requests` reads these when the external link checker runs:
    - http_proxy / HTTP_PROXY
    - https_proxy / HTTPS_PROXY
    - no_proxy / NO_PROXY
    - REQUESTS_CA_BUNDLE / SSL_CERT_FILE
    """

    # Respect already-set env vars so ops can override config.
    http_proxy = getattr(config, "http_proxy", None)
    if http_proxy:
        if not os.getenv("http_proxy"):
            os.environ["http_proxy"] = str(http_proxy)
        if not os.getenv("HTTP_PROXY"):
            os.environ["HTTP_PROXY"] = str(http_proxy)

    https_proxy = getattr(config, "https_proxy", None)
    if https_proxy:
        if not os.getenv("https_proxy"):
            os.environ["https_proxy"] = str(https_proxy)
        if not os.getenv("HTTPS_PROXY"):
            os.environ["HTTPS_PROXY"] = str(https_proxy)

    no_proxy = getattr(config, "no_proxy", None)
    if no_proxy:
        if not os.getenv("no_proxy"):
            os.environ["no_proxy"] = str(no_proxy)
        if not os.getenv("NO_PROXY"):
            os.environ["NO_PROXY"] = str(no_proxy)

    ssl_ca_file = getattr(config, "ssl_ca_file", None)
    if ssl_ca_file:
        if not os.path.exists(str(ssl_ca_file)):
            logging.getLogger(__name__).warning(
                "Configured ssl_ca_file does not exist: %s", ssl_ca_file
            )

        if not os.getenv("SSL_CERT_FILE"):
            os.environ["SSL_CERT_FILE"] = str(ssl_ca_file)
        if not os.getenv("REQUESTS_CA_BUNDLE"):
            os.environ["REQUESTS_CA_BUNDLE"] = str(ssl_ca_file)


def load_config(path: Optional[str] = None) -> AppConfig:
    """Load application configuration from YAML.

    Precedence:
    1) explicit `path`
    2) env var `PROMPT_CATALOG_CONFIG`
    3) `prompt-catalog.yaml` in the current working directory

    Missing config file falls back to defaults.
    """

    config_path = path or os.getenv("PROMPT_CATALOG_CONFIG") or DEFAULT_CONFIG_PATH

    if not os.path.exists(config_path):
        return AppConfig()

    with open(config_path, "r", encoding="utf-8") as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML config {config_path}: {e}") from e

    if raw is None:
        return AppConfig()

    if not isinstance(raw, dict):
        raise ValueError(f"Invalid YAML config (expected mapping), got: {type(raw).__name__}")

    data: Dict[str, Any] = dict(raw)
    return AppConfig(**data)


def configure_logging(debug_level: str) -> None:
    level_name = (debug_level or "INFO").upper().strip()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        raise ValueError(f"Invalid debug_level: {debug_level!r} (expected DEBUG/INFO/WARNING/ERROR)")

    logging.basicConfig(level=level)
