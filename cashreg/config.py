"""Configuration file management and the shared policy store for cashreg."""

import logging
import os
import threading
import tomllib
from pathlib import Path
from typing import Any

import tomli_w

from cashreg.domain.errors import MalformedInputError
from cashreg.domain.models import DEFAULT_COUNTRY, DEFAULT_RANDOM_DIVISOR, PolicyConfig

logger = logging.getLogger(__name__)


def get_xdg_config_home() -> Path:
    """Get XDG config directory, with fallback to ~/.config."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config)
    return Path.home() / ".config"


def get_config_path() -> Path:
    """Get the config file path (XDG compliant).

    Returns:
        Path to the config file.
    """
    return get_xdg_config_home() / "cashreg" / "config.toml"


def save_config(config: dict[str, Any], config_path: Path | None = None) -> None:
    """Save configuration to TOML file with secure permissions.

    Args:
        config: Configuration dictionary.
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "wb") as f:
        tomli_w.dump(config, f)

    os.chmod(config_path, 0o600)


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration from TOML file.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Configuration dictionary.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        MalformedInputError: If the file is not valid TOML.
    """
    if config_path is None:
        config_path = get_config_path()

    with open(config_path, "rb") as f:
        try:
            return tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise MalformedInputError(f"Invalid config file {config_path}: {e}") from e


def build_policy(random_divisor: Any, country: Any, special_cases: Any) -> PolicyConfig:
    """Validate raw values and build a PolicyConfig.

    Raises:
        MalformedInputError: If a value has the wrong type.
    """
    if isinstance(random_divisor, bool) or not isinstance(random_divisor, int):
        raise MalformedInputError("randomDivisor must be an integer")
    if not isinstance(country, str):
        raise MalformedInputError("country must be a string")
    if not isinstance(special_cases, list | tuple) or not all(isinstance(s, str) for s in special_cases):
        raise MalformedInputError("specialCases must be a list of strings")

    return PolicyConfig(random_divisor=random_divisor, country=country, special_cases=tuple(special_cases))


def policy_from_dict(data: Any) -> PolicyConfig:
    """Build a policy from its JSON shape.

    Missing fields take their defaults; the result replaces the old policy wholesale.
    """
    if not isinstance(data, dict):
        raise MalformedInputError("Invalid config")

    special_cases = data.get("specialCases")
    return build_policy(
        data.get("randomDivisor", DEFAULT_RANDOM_DIVISOR),
        data.get("country", DEFAULT_COUNTRY),
        [] if special_cases is None else special_cases,
    )


def policy_to_dict(policy: PolicyConfig) -> dict[str, Any]:
    """Serialize a policy to its JSON shape."""
    return {
        "randomDivisor": policy.random_divisor,
        "country": policy.country,
        "specialCases": list(policy.special_cases),
    }


def load_policy(config_path: Path | None = None) -> PolicyConfig:
    """Load the [policy] table from the config file.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        The stored policy, or defaults if the file doesn't exist.

    Raises:
        MalformedInputError: If the file or a policy value is invalid.
    """
    try:
        config = load_config(config_path)
    except FileNotFoundError:
        return PolicyConfig()

    policy = config.get("policy", {})
    if not isinstance(policy, dict):
        raise MalformedInputError("[policy] must be a table")

    return build_policy(
        policy.get("random_divisor", DEFAULT_RANDOM_DIVISOR),
        policy.get("country", DEFAULT_COUNTRY),
        policy.get("special_cases", []),
    )


def policy_table(policy: PolicyConfig) -> dict[str, Any]:
    """Serialize a policy to its TOML [policy] table."""
    return {
        "random_divisor": policy.random_divisor,
        "country": policy.country,
        "special_cases": list(policy.special_cases),
    }


def save_policy(policy: PolicyConfig, config_path: Path | None = None) -> None:
    """Replace the [policy] table in the config file, keeping other tables."""
    try:
        config = load_config(config_path)
    except FileNotFoundError:
        config = {}

    config["policy"] = policy_table(policy)
    save_config(config, config_path)


def create_default_config(config_path: Path | None = None) -> None:
    """Create default config file with secure permissions.

    Args:
        config_path: Path to config file. If None, uses default location.
    """
    save_config({"policy": policy_table(PolicyConfig())}, config_path)


class ConfigStore:
    """Process-wide policy holder.

    Readers always get a complete snapshot; set() swaps the whole policy under the lock.
    """

    def __init__(self, policy: PolicyConfig | None = None) -> None:
        self._lock = threading.Lock()
        self._policy = policy or PolicyConfig()

    def get(self) -> PolicyConfig:
        with self._lock:
            return self._policy

    def set(self, policy: PolicyConfig) -> PolicyConfig:
        with self._lock:
            self._policy = policy
        logger.info(
            "Policy replaced: divisor=%d country=%s special_cases=%s",
            policy.random_divisor,
            policy.country,
            list(policy.special_cases),
        )
        return policy
