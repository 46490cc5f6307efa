"""Tests for input validation helpers."""

from __future__ import annotations

import pytest

from azure_containers.validation import (
    default_dns_prefix,
    validate_cluster_name,
    validate_credential_role,
    validate_node_pool,
)


class TestValidateClusterName:
    @pytest.mark.parametrize("name", ["aks1", "a", "my_cluster-01", "A" * 63])
    def test_valid(self, name: str) -> None:
        validate_cluster_name(name)

    @pytest.mark.parametrize("name", ["", "-aks", "aks-", "aks/1", "a" * 64, "my cluster"])
    def test_invalid(self, name: str) -> None:
        with pytest.raises(ValueError, match="Invalid cluster name"):
            validate_cluster_name(name)


class TestValidateNodePool:
    def test_valid(self) -> None:
        validate_node_pool("userpool")

    def test_none_is_valid(self) -> None:
        validate_node_pool(None)

    @pytest.mark.parametrize("name", ["1pool", "UserPool", "averyveryverylongpool", "pool-1"])
    def test_invalid(self, name: str) -> None:
        with pytest.raises(ValueError, match="Invalid node pool name"):
            validate_node_pool(name)


class TestValidateCredentialRole:
    @pytest.mark.parametrize("role", ["User", "Admin"])
    def test_valid(self, role: str) -> None:
        validate_credential_role(role)

    def test_invalid(self) -> None:
        with pytest.raises(ValueError, match="Must be one of: Admin, User"):
            validate_credential_role("admin")


class TestDefaultDnsPrefix:
    def test_combines_parts(self) -> None:
        assert default_dns_prefix("mycluster", "my-rg", "12345678-abcd") == "mycluster-my-rg-123456"

    def test_strips_invalid_and_truncates(self) -> None:
        prefix = default_dns_prefix("my_very_long_cluster", "group.with.dots", "abcdef123")
        assert prefix == "myverylong-groupwithdots-abcdef"

    def test_prefixes_letter_when_name_starts_with_digit(self) -> None:
        assert default_dns_prefix("1cluster", "rg", "abcdef").startswith("a1cluster")
