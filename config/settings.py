"""
config/settings.py - Environment-backed indexer configuration.

All values are validated at startup. Any invalid value raises
ConfigError before the indexer touches the network.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from config import load_networks
from core.constants import (
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    DEFAULT_PAGE_SIZE,
    DEFAULT_RATE_LIMIT_DELAY_MS,
    DEFAULT_REGISTRY_DIR,
    MAX_PAGE_SIZE,
    MIN_PAGE_SIZE,
    ErrorCode,
)
from core.exceptions import ConfigError
from indexer.starting_point import StartingPoint, parse_starting_point

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR"}


def _parse_bool(name: str, raw: Optional[str], default: bool = False) -> bool:
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


def _parse_int(name: str, raw: Optional[str], default: int) -> int:
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None


def _parse_float(name: str, raw: Optional[str], default: float) -> float:
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None


def _validate_url(name: str, url: str) -> str:
    if not url.startswith(("http://", "https://")):
        raise ConfigError(f"{name} must be an http(s) URL, got {url!r}")
    return url.rstrip("/")


@dataclass
class IndexerConfig:
    """Validated indexer configuration."""
    network: str
    mirror_node_url: str
    mirror_node_url_web3: str
    starting_point: Optional[StartingPoint] = None
    detection_only: bool = False
    page_size: int = DEFAULT_PAGE_SIZE
    registry_dir: Path = Path(DEFAULT_REGISTRY_DIR)
    rate_limit_delay_ms: int = DEFAULT_RATE_LIMIT_DELAY_MS
    http_timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS
    log_level: str = "INFO"
    json_logs: bool = True

    def __post_init__(self) -> None:
        if not MIN_PAGE_SIZE <= self.page_size <= MAX_PAGE_SIZE:
            raise ConfigError(
                f"Page size must be between {MIN_PAGE_SIZE} and {MAX_PAGE_SIZE}, "
                f"got {self.page_size}"
            )
        if self.rate_limit_delay_ms < 0:
            raise ConfigError(
                f"RATE_LIMIT_DELAY_MS must be >= 0, got {self.rate_limit_delay_ms}"
            )
        if self.http_timeout_seconds <= 0:
            raise ConfigError(
                f"HTTP_TIMEOUT_SECONDS must be > 0, got {self.http_timeout_seconds}"
            )
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ConfigError(f"Unknown log level: {self.log_level}")

    @property
    def network_registry_dir(self) -> Path:
        return self.registry_dir / self.network

    @classmethod
    def from_env(
        cls,
        env: Optional[Mapping[str, str]] = None,
        networks: Optional[dict] = None,
    ) -> "IndexerConfig":
        """
        Build config from environment variables.

        Args:
            env: Mapping to read from (default: os.environ after loading .env)
            networks: Network table (default: config/networks.yaml)

        Raises:
            ConfigError: on any missing or invalid value
        """
        if env is None:
            load_dotenv()
            env = os.environ
        if networks is None:
            networks = load_networks()

        network = (env.get("HEDERA_NETWORK") or "").strip()
        if not network:
            raise ConfigError("HEDERA_NETWORK is required", code=ErrorCode.CONFIG_MISSING)
        if network not in networks:
            raise ConfigError(
                f"Unknown network: {network}",
                details={"known": sorted(networks)},
            )
        network_config = networks[network] or {}
        production = bool(network_config.get("production", True))

        mirror_node_url = (env.get("MIRROR_NODE_URL") or "").strip()
        if not mirror_node_url:
            if production:
                raise ConfigError(
                    f"MIRROR_NODE_URL is required for network {network}",
                    code=ErrorCode.CONFIG_MISSING,
                )
            mirror_node_url = network_config.get("mirror_node_url", "")
            if not mirror_node_url:
                raise ConfigError(
                    f"No default mirror node URL for network {network}",
                    code=ErrorCode.CONFIG_MISSING,
                )
        mirror_node_url = _validate_url("MIRROR_NODE_URL", mirror_node_url)

        web3_url = (env.get("MIRROR_NODE_URL_WEB3") or "").strip()
        if not web3_url:
            web3_url = network_config.get("mirror_node_url_web3") or mirror_node_url
        web3_url = _validate_url("MIRROR_NODE_URL_WEB3", web3_url)

        raw_starting_point = (env.get("STARTING_POINT") or "").strip()
        starting_point = parse_starting_point(raw_starting_point) if raw_starting_point else None

        return cls(
            network=network,
            mirror_node_url=mirror_node_url,
            mirror_node_url_web3=web3_url,
            starting_point=starting_point,
            detection_only=_parse_bool("ENABLE_DETECTION_ONLY", env.get("ENABLE_DETECTION_ONLY")),
            page_size=_parse_int("SCAN_CONTRACT_LIMIT", env.get("SCAN_CONTRACT_LIMIT"), DEFAULT_PAGE_SIZE),
            registry_dir=Path(env.get("REGISTRY_DIR") or DEFAULT_REGISTRY_DIR),
            rate_limit_delay_ms=_parse_int(
                "RATE_LIMIT_DELAY_MS", env.get("RATE_LIMIT_DELAY_MS"), DEFAULT_RATE_LIMIT_DELAY_MS
            ),
            http_timeout_seconds=_parse_float(
                "HTTP_TIMEOUT_SECONDS", env.get("HTTP_TIMEOUT_SECONDS"), DEFAULT_HTTP_TIMEOUT_SECONDS
            ),
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
            json_logs=_parse_bool("LOG_JSON", env.get("LOG_JSON"), default=True),
        )
