"""Shared test fixtures for all test modules."""

from __future__ import annotations

import os
from collections.abc import Iterator
from unittest.mock import MagicMock, patch

import pytest

from azure_containers.clients.azure_aks import AzureAksClient
from azure_containers.config import GROUP_MAP, load_group_map
from azure_containers.subscription import AzureSubscription

SUBSCRIPTION_ID = "12345678-1234-1234-1234-123456789abc"

GROUPS_YAML = f"""
groups:
  dev:
    subscription_id: "{SUBSCRIPTION_ID}"
    resource_group: rg-dev
    location: eastus
  prod:
    subscription_id: "{SUBSCRIPTION_ID}"
    resource_group: rg-prod
    location: westus2
"""


@pytest.fixture(autouse=True)
def group_map(tmp_path_factory: pytest.TempPathFactory) -> Iterator[None]:
    """Load the test resource group profiles for every test."""
    path = tmp_path_factory.mktemp("config") / "groups.yaml"
    path.write_text(GROUPS_YAML)
    with patch.dict(os.environ, {"AZURE_CONTAINERS_GROUPS": str(path), "AKS_CREATE_RETRY_DELAY": "0"}):
        load_group_map()
        yield
    GROUP_MAP.clear()


@pytest.fixture
def mock_aks() -> MagicMock:
    """Mock AzureAksClient; tests configure the methods they exercise."""
    return MagicMock(spec=AzureAksClient)


@pytest.fixture
def mock_graph() -> MagicMock:
    return MagicMock()


@pytest.fixture
def subscription(mock_aks: MagicMock, mock_graph: MagicMock) -> AzureSubscription:
    sub = AzureSubscription(SUBSCRIPTION_ID, credential=MagicMock())
    sub.aks = mock_aks
    sub._graph = mock_graph
    return sub


def make_pool(
    name: str = "pool1",
    count: int = 3,
    version: str = "1.29.8",
    provisioning_state: str = "Succeeded",
) -> MagicMock:
    """Create a mock AKS agent pool profile."""
    pool = MagicMock()
    pool.name = name
    pool.count = count
    pool.vm_size = "Standard_DS2_v2"
    pool.os_type = "Linux"
    pool.mode = "System"
    pool.current_orchestrator_version = version
    pool.orchestrator_version = version
    pool.provisioning_state = provisioning_state
    return pool


def make_cluster(
    name: str = "aks1",
    resource_group: str = "rg-dev",
    provisioning_state: str = "Succeeded",
    client_id: str = "00000000-aaaa-bbbb-cccc-000000000001",
) -> MagicMock:
    """Create a mock ManagedCluster as returned by the container service SDK."""
    cluster = MagicMock()
    cluster.name = name
    cluster.id = (
        f"/subscriptions/{SUBSCRIPTION_ID}/resourceGroups/{resource_group}"
        f"/providers/Microsoft.ContainerService/managedClusters/{name}"
    )
    cluster.location = "eastus"
    cluster.provisioning_state = provisioning_state
    cluster.kubernetes_version = "1.29.8"
    cluster.fqdn = f"{name}-dns.hcp.eastus.azmk8s.io"
    cluster.node_resource_group = f"MC_{resource_group}_{name}_eastus"
    cluster.agent_pool_profiles = [make_pool()]
    cluster.service_principal_profile.client_id = client_id
    cluster.aad_profile = None
    return cluster
