"""Tests for config.py: retry settings, file locations, resource group profiles."""

from __future__ import annotations

import dataclasses
import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from azure_containers.config import (
    GROUP_MAP,
    GroupConfig,
    RetryConfig,
    _load_group_map,
    default_kubeconfig_path,
    get_retry_config,
    kube_default_config,
    resolve_group,
    validate_group_config,
)


class TestRetryConfig:
    def test_defaults(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            config = get_retry_config()
        assert config.max_attempts == 20
        assert config.delay_seconds == 5.0

    def test_overrides_from_env(self) -> None:
        with patch.dict(os.environ, {"AKS_CREATE_MAX_ATTEMPTS": "3", "AKS_CREATE_RETRY_DELAY": "1.5"}):
            config = RetryConfig()
        assert config.max_attempts == 3
        assert config.delay_seconds == 1.5

    def test_is_frozen(self) -> None:
        config = get_retry_config()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.max_attempts = 1  # type: ignore[misc]


class TestKubeconfigPaths:
    def test_uses_config_dir_when_present(self, tmp_path: Path) -> None:
        with patch.dict(os.environ, {"AZURE_CONTAINERS_DIR": str(tmp_path)}):
            assert default_kubeconfig_path("aks1") == tmp_path / "kubeconfig_aks1"

    def test_falls_back_to_tempdir(self, tmp_path: Path) -> None:
        missing = tmp_path / "does-not-exist"
        with patch.dict(os.environ, {"AZURE_CONTAINERS_DIR": str(missing)}):
            path = default_kubeconfig_path("aks1")
        assert path == Path(tempfile.gettempdir()) / "kubeconfig_aks1"

    def test_kube_default_config(self) -> None:
        assert kube_default_config() == Path.home() / ".kube" / "config"


class TestGroupMap:
    def test_loaded_from_env_path(self) -> None:
        assert set(GROUP_MAP) == {"dev", "prod"}
        assert GROUP_MAP["prod"].location == "westus2"

    def test_resolve_valid_group(self) -> None:
        config = resolve_group("dev")
        assert isinstance(config, GroupConfig)
        assert config.resource_group == "rg-dev"

    def test_resolve_unknown_group_lists_valid_ids(self) -> None:
        with pytest.raises(ValueError, match="Unknown group 'nope'. Valid groups: dev, prod"):
            resolve_group("nope")

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="Resource group configuration file not found"):
            _load_group_map(tmp_path / "groups.yaml")

    def test_missing_groups_key(self, tmp_path: Path) -> None:
        path = tmp_path / "groups.yaml"
        path.write_text("clusters: {}\n")
        with pytest.raises(ValueError, match="top-level 'groups' key"):
            _load_group_map(path)

    def test_empty_groups_section(self, tmp_path: Path) -> None:
        path = tmp_path / "groups.yaml"
        path.write_text("groups: {}\n")
        with pytest.raises(ValueError, match="empty or invalid 'groups' section"):
            _load_group_map(path)

    def test_missing_fields(self, tmp_path: Path) -> None:
        path = tmp_path / "groups.yaml"
        path.write_text("groups:\n  dev:\n    resource_group: rg\n")
        with pytest.raises(ValueError, match="missing required fields: subscription_id, location"):
            _load_group_map(path)

    def test_entry_must_be_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "groups.yaml"
        path.write_text("groups:\n  dev: rg-dev\n")
        with pytest.raises(ValueError, match="must be a mapping, got str"):
            _load_group_map(path)


class TestValidateGroupConfig:
    def test_accepts_loaded_groups(self) -> None:
        validate_group_config()

    def test_detects_placeholder_subscription_ids(self) -> None:
        bad = GroupConfig("dev", "<subscription-id>", "rg-dev", "eastus")
        with (
            patch.dict("azure_containers.config.GROUP_MAP", {"dev": bad}, clear=True),
            pytest.raises(RuntimeError, match="placeholder subscription_id detected"),
        ):
            validate_group_config()

    def test_detects_invalid_uuid_and_empty_fields(self) -> None:
        bad = GroupConfig("dev", "not-a-uuid", "", "")
        with (
            patch.dict("azure_containers.config.GROUP_MAP", {"dev": bad}, clear=True),
            pytest.raises(RuntimeError) as exc_info,
        ):
            validate_group_config()
        message = str(exc_info.value)
        assert "not a valid UUID" in message
        assert "resource_group is empty" in message
        assert "location is empty" in message
