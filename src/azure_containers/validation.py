"""Input validation helpers for cluster and agent pool parameters."""

from __future__ import annotations

import re

# 1-63 chars, alphanumerics, hyphens and underscores, alphanumeric at both ends
_CLUSTER_NAME_RE = re.compile(r"^[A-Za-z0-9]([A-Za-z0-9_\-]{0,61}[A-Za-z0-9])?$")

# AKS node pool: lowercase alphanumeric, 1-12 chars, starts with letter
_NODE_POOL_RE = re.compile(r"^[a-z][a-z0-9]{0,11}$")

_VALID_ROLES = {"User", "Admin"}


def validate_cluster_name(name: str) -> None:
    """Validate an AKS managed cluster name."""
    if not _CLUSTER_NAME_RE.match(name):
        msg = f"Invalid cluster name: {name!r}. Must be 1-63 alphanumerics, hyphens or underscores."
        raise ValueError(msg)


def validate_node_pool(node_pool: str | None) -> None:
    """Validate an AKS node pool name."""
    if node_pool is None:
        return
    if not _NODE_POOL_RE.match(node_pool):
        msg = f"Invalid node pool name: {node_pool!r}. Must be 1-12 lowercase alphanumeric starting with a letter."
        raise ValueError(msg)


def validate_credential_role(role: str) -> None:
    """Validate the kubeconfig credential role."""
    if role not in _VALID_ROLES:
        valid = ", ".join(sorted(_VALID_ROLES))
        msg = f"Invalid role: {role!r}. Must be one of: {valid}"
        raise ValueError(msg)


def default_dns_prefix(name: str, resource_group: str, subscription_id: str) -> str:
    """Derive a DNS prefix unique to the subscription from the cluster and group names."""
    name_part = re.sub(r"[^A-Za-z0-9-]", "", name)[:10]
    if not name_part or not name_part[0].isalpha():
        name_part = ("a" + name_part)[:10]
    group_part = re.sub(r"[^A-Za-z0-9-]", "", resource_group)[:16]
    return f"{name_part}-{group_part}-{subscription_id[:6]}"
