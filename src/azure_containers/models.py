"""Pydantic v2 models for agent pools, service principals, and cluster summaries."""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Any, Literal

from pydantic import BaseModel, Field

# --- Agent pools ---


class AgentPool(BaseModel):
    """Settings for a single AKS agent (node) pool."""

    name: str
    count: int = Field(ge=1)
    vm_size: str = "Standard_DS2_v2"
    os_type: Literal["Linux", "Windows"] = "Linux"
    mode: Literal["System", "User"] = "System"

    def to_arm(self) -> dict[str, Any]:
        """Render as an ARM ``agentPoolProfiles`` entry."""
        return {
            "name": self.name,
            "count": self.count,
            "vmSize": self.vm_size,
            "osType": self.os_type,
            "mode": self.mode,
        }


def _as_list(value: Any) -> list[Any]:
    if isinstance(value, str) or not isinstance(value, Sequence):
        return [value]
    return list(value)


def _make_unique(names: list[str]) -> list[str]:
    seen: dict[str, int] = {}
    taken = set(names)
    result: list[str] = []
    for name in names:
        if name not in seen:
            seen[name] = 0
            result.append(name)
            continue
        suffix = seen[name]
        candidate = name
        while candidate in taken:
            suffix += 1
            candidate = f"{name}{suffix}"
        seen[name] = suffix
        taken.add(candidate)
        result.append(candidate)
    return result


def aks_pools(
    name: str | Sequence[str],
    count: int | Sequence[int],
    size: str | Sequence[str] = "Standard_DS2_v2",
    os: str | Sequence[str] = "Linux",
) -> list[AgentPool]:
    """Build agent pool definitions for ``create_aks``.

    Pass lists to define several pools; scalar arguments are replicated to
    match. Repeated names get a numeric suffix so every pool name is unique.

        aks_pools("pool1", 5)
        aks_pools(["pool1", "pool2"], [3, 3], size=["Standard_DS2_v2", "Standard_DS3_v2"])
    """
    columns = [_as_list(name), _as_list(count), _as_list(size), _as_list(os)]
    length = max(len(c) for c in columns)
    for column in columns:
        if len(column) not in (1, length):
            msg = f"Agent pool arguments must be scalars or lists of length {length}."
            raise ValueError(msg)
    names, counts, sizes, oses = (c * length if len(c) == 1 else c for c in columns)

    return [
        AgentPool(name=n, count=int(c), vm_size=s, os_type=o)
        for n, c, s, o in zip(_make_unique(list(names)), counts, sizes, oses, strict=True)
    ]


# --- Service principals ---


class ServicePrincipal(BaseModel):
    """Client ID and secret that AKS uses to manage the cluster's Azure resources."""

    app_id: str
    secret: str = Field(repr=False)

    def to_arm(self) -> dict[str, str]:
        return {"clientId": self.app_id, "secret": self.secret}


# --- Cluster summary ---


class AgentPoolSummary(BaseModel):
    name: str | None
    count: int | None = None
    vm_size: str | None = None
    os_type: str | None = None
    mode: str | None = None
    orchestrator_version: str | None = None
    provisioning_state: str | None = None


class ClusterSummary(BaseModel):
    """Flattened view of a managed cluster."""

    name: str
    location: str | None = None
    kubernetes_version: str | None = None
    provisioning_state: str | None = None
    fqdn: str | None = None
    node_resource_group: str | None = None
    agent_pools: list[AgentPoolSummary] = Field(default_factory=list)


# --- Output scrubbing ---

_IP_PATTERN = re.compile(r"\b\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}\b")
_SUBSCRIPTION_PATTERN = re.compile(r"/subscriptions/[a-f0-9-]+", re.IGNORECASE)
_RESOURCE_GROUP_PATTERN = re.compile(r"/resourceGroups/[^/]+", re.IGNORECASE)
_FQDN_PATTERN = re.compile(r"\b[\w.-]+\.azmk8s\.io\b", re.IGNORECASE)
_AZURE_HOST_PATTERN = re.compile(r"\b[\w.-]+\.(vault\.azure\.net|blob\.core\.windows\.net)\b", re.IGNORECASE)


def scrub_sensitive_values(text: str) -> str:
    """Remove internal IPs, subscription IDs, resource group names, and Azure FQDNs from text."""
    if not text:
        return text
    # resource group before subscription so the combined ARM path is handled
    result = _IP_PATTERN.sub("[REDACTED_IP]", text)
    result = _RESOURCE_GROUP_PATTERN.sub("/resourceGroups/[REDACTED]", result)
    result = _SUBSCRIPTION_PATTERN.sub("/subscriptions/[REDACTED]", result)
    result = _FQDN_PATTERN.sub("[REDACTED_FQDN]", result)
    result = _AZURE_HOST_PATTERN.sub("[REDACTED_HOST]", result)
    return result
