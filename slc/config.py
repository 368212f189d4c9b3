"""YAML configuration file loading."""

import logging
from dataclasses import dataclass, fields
from pathlib import Path

import yaml

from slc.probe import ProbeSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".slc"
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.yaml"


@dataclass
class SlcConfig:
    """Top-level configuration for the slc tool.

    Every field has a default, so no config file is needed.

    Attributes:
        url: Cluster name or RPC URL used when ``--url`` is not given.
        concurrency: Maximum number of probes in flight.
        ping_count: Echo requests sent to each peer.
        ping_interval: Seconds between echo requests.
        ping_timeout: Upper bound in seconds for one peer's probe.
        rpc_timeout: Timeout in seconds for the ``getClusterNodes`` call.
    """

    url: str = "mainnet-beta"
    concurrency: int = 20
    ping_count: int = 5
    ping_interval: float = 0.2
    ping_timeout: float = 3.0
    rpc_timeout: float = 30.0

    def probe_settings(self) -> ProbeSettings:
        return ProbeSettings(
            count=self.ping_count,
            interval=self.ping_interval,
            timeout=self.ping_timeout,
        )


class ConfigError(Exception):
    """Raised when a configuration file is malformed or unreadable."""


# Validation kind for each SlcConfig field; YAML keys are the field names.
_FIELD_KINDS: dict[str, str] = {
    "url": "string",
    "concurrency": "positive integer",
    "ping_count": "positive integer",
    "ping_interval": "positive number",
    "ping_timeout": "positive number",
    "rpc_timeout": "positive number",
}


def load_config(path: Path | str | None = None) -> SlcConfig:
    """Load ``SlcConfig`` from YAML, falling back to defaults.

    With no *path*, ``~/.slc/config.yaml`` is read if present.  An empty
    file means all defaults; unknown keys are logged and ignored.

    Raises:
        FileNotFoundError: If an explicit *path* doesn't exist.
        ConfigError: On invalid YAML, a non-mapping document, or a value
            of the wrong type or range.
    """
    if path is None:
        source = DEFAULT_CONFIG_PATH.expanduser()
        if not source.is_file():
            logger.debug("No config file at %s; using defaults", source)
            return SlcConfig()
    else:
        source = Path(path).expanduser()
        if not source.is_file():
            raise FileNotFoundError(f"Config file not found: {source}")

    logger.debug("Loading config from %s", source)
    try:
        raw = yaml.safe_load(source.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {source}: {exc}") from exc

    if raw is None:
        return SlcConfig()
    if not isinstance(raw, dict):
        raise ConfigError(
            f"Expected a YAML mapping at the top level in {source}, "
            f"got {type(raw).__name__}"
        )

    known = {f.name for f in fields(SlcConfig)}
    unknown = sorted(str(key) for key in raw if key not in known)
    if unknown:
        logger.warning(
            "Ignoring unknown config keys in %s: %s", source, ", ".join(unknown)
        )

    overrides = {name: raw[name] for name in known if name in raw}
    for name, value in overrides.items():
        kind = _FIELD_KINDS[name]
        if not _is_valid(kind, value):
            raise ConfigError(f"{name} must be a {kind} in {source}, got {value!r}")

    return SlcConfig(**overrides)


def _is_valid(kind: str, value: object) -> bool:
    if kind == "string":
        return isinstance(value, str) and bool(value)
    if isinstance(value, bool):
        return False
    if kind == "positive integer":
        return isinstance(value, int) and value >= 1
    return isinstance(value, (int, float)) and value > 0
