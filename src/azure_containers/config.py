"""Retry settings, file locations, and resource-group profiles with environment overrides."""

from __future__ import annotations

import os
import re
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


@dataclass(frozen=True)
class RetryConfig:
    """Settings for retrying cluster creation while a new service principal propagates."""

    max_attempts: int = field(default_factory=lambda: int(os.environ.get("AKS_CREATE_MAX_ATTEMPTS", "20")))
    delay_seconds: float = field(default_factory=lambda: float(os.environ.get("AKS_CREATE_RETRY_DELAY", "5")))


@dataclass(frozen=True)
class GroupConfig:
    """A named resource group profile used by the MCP server."""

    group_id: str
    subscription_id: str
    resource_group: str
    location: str


def get_retry_config() -> RetryConfig:
    """Return retry configuration with environment variable overrides applied."""
    return RetryConfig()


def config_dir() -> Path:
    """Return the library's configuration directory (``AZURE_CONTAINERS_DIR``)."""
    return Path(os.environ.get("AZURE_CONTAINERS_DIR", Path.home() / ".azure_containers"))


def default_kubeconfig_path(cluster_name: str) -> Path:
    """Where a cluster's kubeconfig is stored when the caller does not choose a path.

    Falls back to the system temp directory if the configuration directory
    has not been created.
    """
    base = config_dir()
    if not base.is_dir():
        base = Path(tempfile.gettempdir())
    return base / f"kubeconfig_{cluster_name}"


def kube_default_config() -> Path:
    return Path.home() / ".kube" / "config"


_REQUIRED_FIELDS = ("subscription_id", "resource_group", "location")


def _load_group_map(path: Path) -> dict[str, GroupConfig]:
    """Parse a YAML group profile file and return a mapping of profile ID to GroupConfig.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file content is malformed or missing required fields.
    """
    if not path.exists():
        msg = (
            f"Resource group configuration file not found: {path}. "
            "Create groups.yaml or set AZURE_CONTAINERS_GROUPS to point to your config file."
        )
        raise FileNotFoundError(msg)

    raw = yaml.safe_load(path.read_text())

    if not isinstance(raw, dict) or "groups" not in raw:
        msg = f"Group config file {path} must contain a top-level 'groups' key."
        raise ValueError(msg)

    groups_raw: Any = raw["groups"]
    if not isinstance(groups_raw, dict) or len(groups_raw) == 0:
        msg = f"Group config file {path} has an empty or invalid 'groups' section."
        raise ValueError(msg)

    group_map: dict[str, GroupConfig] = {}
    for group_id, entry in groups_raw.items():
        if not isinstance(entry, dict):
            msg = f"Group '{group_id}' must be a mapping, got {type(entry).__name__}."
            raise ValueError(msg)

        missing = [f for f in _REQUIRED_FIELDS if f not in entry]
        if missing:
            msg = f"Group '{group_id}' is missing required fields: {', '.join(missing)}."
            raise ValueError(msg)

        group_map[group_id] = GroupConfig(
            group_id=group_id,
            subscription_id=str(entry["subscription_id"]),
            resource_group=str(entry["resource_group"]),
            location=str(entry["location"]),
        )

    return group_map


GROUP_MAP: dict[str, GroupConfig] = {}


def load_group_map() -> dict[str, GroupConfig]:
    """Load group profiles from YAML and populate ``GROUP_MAP``.

    Reads the file path from ``AZURE_CONTAINERS_GROUPS``, defaulting to
    ``groups.yaml`` in the current working directory.
    """
    path = Path(os.environ.get("AZURE_CONTAINERS_GROUPS", "groups.yaml"))
    loaded = _load_group_map(path)
    GROUP_MAP.clear()
    GROUP_MAP.update(loaded)
    return GROUP_MAP


def resolve_group(group_id: str) -> GroupConfig:
    """Resolve a profile ID to its resource group configuration.

    Raises:
        ValueError: If the profile is not in GROUP_MAP.
    """
    if group_id not in GROUP_MAP:
        valid = ", ".join(sorted(GROUP_MAP.keys()))
        msg = f"Unknown group '{group_id}'. Valid groups: {valid}"
        raise ValueError(msg)
    return GROUP_MAP[group_id]


_UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)


def validate_group_config() -> None:
    """Validate all group profiles at startup.

    Raises RuntimeError on placeholder or malformed subscription IDs and empty fields.
    """
    errors: list[str] = []
    for group_id, config in GROUP_MAP.items():
        if config.subscription_id.startswith("<") and config.subscription_id.endswith(">"):
            errors.append(f"{group_id}: placeholder subscription_id detected")
        elif not _UUID_RE.match(config.subscription_id):
            errors.append(f"{group_id}: subscription_id is not a valid UUID")

        if not config.resource_group:
            errors.append(f"{group_id}: resource_group is empty")
        if not config.location:
            errors.append(f"{group_id}: location is empty")

    if errors:
        detail = "; ".join(errors)
        msg = f"Group configuration errors: {detail}."
        raise RuntimeError(msg)
