"""AKS management-plane wrapper: clusters, credentials, versions, agent pools, node resources."""

from __future__ import annotations

import re
import threading
from typing import Any

import structlog
from azure.core.credentials import TokenCredential
from azure.mgmt.containerservice import ContainerServiceClient
from azure.mgmt.containerservice import models as aks_models
from azure.mgmt.resource import ResourceManagementClient

from azure_containers.validation import validate_credential_role

log = structlog.get_logger()

MANAGED_CLUSTER_TYPE = "Microsoft.ContainerService/managedClusters"

_RESOURCE_GROUP_RE = re.compile(r"/resourceGroups/([^/]+)", re.IGNORECASE)


def resource_group_from_id(resource_id: str | None) -> str | None:
    """Extract the resource group name from an ARM resource ID."""
    if not resource_id:
        return None
    match = _RESOURCE_GROUP_RE.search(resource_id)
    return match.group(1) if match else None


def version_key(version: str) -> tuple[int, ...]:
    return tuple(int(p) for p in re.findall(r"\d+", version))


class AzureAksClient:
    """Wrapper around the Azure container service and resource management APIs for one subscription."""

    def __init__(self, subscription_id: str, credential: TokenCredential) -> None:
        self.subscription_id = subscription_id
        self._credential = credential
        self._container_client: ContainerServiceClient | None = None
        self._resource_client: ResourceManagementClient | None = None
        self._lock = threading.Lock()

    def _get_container_client(self) -> ContainerServiceClient:
        with self._lock:
            if self._container_client is None:
                self._container_client = ContainerServiceClient(
                    credential=self._credential,
                    subscription_id=self.subscription_id,
                )
            return self._container_client

    def _get_resource_client(self) -> ResourceManagementClient:
        with self._lock:
            if self._resource_client is None:
                self._resource_client = ResourceManagementClient(
                    credential=self._credential,
                    subscription_id=self.subscription_id,
                )
            return self._resource_client

    # --- Managed clusters ---

    def create_or_update_cluster(
        self,
        resource_group: str,
        name: str,
        body: dict[str, Any],
        wait: bool = True,
    ) -> aks_models.ManagedCluster | None:
        """PUT a managed cluster from an ARM JSON body.

        Returns the provisioned cluster when ``wait`` is true, else None once
        ARM has accepted the request.
        """
        client = self._get_container_client()
        parameters = aks_models.ManagedCluster.from_dict(body)
        log.info("create_cluster_requested", resource_group=resource_group, cluster=name, wait=wait)
        poller = client.managed_clusters.begin_create_or_update(resource_group, name, parameters)
        if not wait:
            return None
        return poller.result()

    def get_cluster(self, resource_group: str, name: str) -> aks_models.ManagedCluster:
        client = self._get_container_client()
        try:
            return client.managed_clusters.get(resource_group, name)
        except Exception:
            log.error("failed_to_get_cluster", resource_group=resource_group, cluster=name)
            raise

    def list_clusters(self, resource_group: str | None = None) -> list[aks_models.ManagedCluster]:
        """List managed clusters in a resource group, or the whole subscription.

        The SDK pager follows ``nextLink`` until every page has been read.
        """
        client = self._get_container_client()
        try:
            if resource_group:
                pager = client.managed_clusters.list_by_resource_group(resource_group)
            else:
                pager = client.managed_clusters.list()
            return list(pager)
        except Exception:
            log.error("failed_to_list_clusters", subscription=self.subscription_id, resource_group=resource_group)
            raise

    def delete_cluster(self, resource_group: str, name: str, wait: bool = False) -> None:
        client = self._get_container_client()
        log.info("delete_cluster_requested", resource_group=resource_group, cluster=name, wait=wait)
        poller = client.managed_clusters.begin_delete(resource_group, name)
        if wait:
            poller.result()

    def update_cluster_tags(self, resource_group: str, name: str, tags: dict[str, str]) -> aks_models.ManagedCluster:
        client = self._get_container_client()
        poller = client.managed_clusters.begin_update_tags(resource_group, name, aks_models.TagsObject(tags=tags))
        return poller.result()

    def list_cluster_credentials(self, resource_group: str, name: str, role: str = "User") -> bytes:
        """Return the raw kubeconfig for the cluster's user or admin credential."""
        validate_credential_role(role)
        client = self._get_container_client()
        try:
            if role == "Admin":
                result = client.managed_clusters.list_cluster_admin_credentials(resource_group, name)
            else:
                result = client.managed_clusters.list_cluster_user_credentials(resource_group, name)
        except Exception:
            log.error("failed_to_list_credentials", resource_group=resource_group, cluster=name, role=role)
            raise

        if not result.kubeconfigs:
            msg = f"No {role} credentials returned for cluster '{name}'."
            raise RuntimeError(msg)
        return bytes(result.kubeconfigs[0].value)

    def reset_service_principal(self, resource_group: str, name: str, client_id: str, secret: str) -> None:
        client = self._get_container_client()
        profile = aks_models.ManagedClusterServicePrincipalProfile(client_id=client_id, secret=secret)
        client.managed_clusters.begin_reset_service_principal_profile(resource_group, name, profile).result()

    def reset_aad_profile(self, resource_group: str, name: str, profile: aks_models.ManagedClusterAADProfile) -> None:
        client = self._get_container_client()
        client.managed_clusters.begin_reset_aad_profile(resource_group, name, profile).result()

    def list_kubernetes_versions(self, location: str) -> list[str]:
        """Kubernetes versions available for new clusters in a region, oldest first."""
        client = self._get_container_client()
        try:
            result = client.managed_clusters.list_kubernetes_versions(location)
        except Exception:
            log.error("failed_to_list_versions", location=location)
            raise

        versions: set[str] = set()
        for entry in result.values or []:
            if entry.patch_versions:
                versions.update(entry.patch_versions.keys())
            elif entry.version:
                versions.add(entry.version)
        return sorted(versions, key=version_key)

    def get_upgrade_profile(self, resource_group: str, name: str) -> dict[str, Any]:
        """Available upgrade versions for the control plane and each agent pool."""
        client = self._get_container_client()
        try:
            profile = client.managed_clusters.get_upgrade_profile(resource_group, name)
        except Exception:
            log.error("failed_to_get_upgrade_profile", resource_group=resource_group, cluster=name)
            raise

        control_plane_upgrades = []
        if profile.control_plane_profile and profile.control_plane_profile.upgrades:
            control_plane_upgrades = [u.kubernetes_version for u in profile.control_plane_profile.upgrades if u]

        pool_upgrades: dict[str, list[str]] = {}
        for pool_profile in profile.agent_pool_profiles or []:
            versions: list[str] = []
            if pool_profile.upgrades:
                versions = [str(u.kubernetes_version) for u in pool_profile.upgrades if u]
            if pool_profile.name:
                pool_upgrades[str(pool_profile.name)] = versions

        return {
            "control_plane_version": (
                profile.control_plane_profile.kubernetes_version if profile.control_plane_profile else None
            ),
            "control_plane_upgrades": control_plane_upgrades,
            "pool_upgrades": pool_upgrades,
        }

    # --- Agent pools ---

    def list_agent_pools(self, resource_group: str, cluster: str) -> list[aks_models.AgentPool]:
        client = self._get_container_client()
        try:
            return list(client.agent_pools.list(resource_group, cluster))
        except Exception:
            log.error("failed_to_list_agent_pools", resource_group=resource_group, cluster=cluster)
            raise

    def get_agent_pool(self, resource_group: str, cluster: str, pool: str) -> aks_models.AgentPool:
        client = self._get_container_client()
        try:
            return client.agent_pools.get(resource_group, cluster, pool)
        except Exception:
            log.error("failed_to_get_agent_pool", resource_group=resource_group, cluster=cluster, pool=pool)
            raise

    def create_or_update_agent_pool(
        self,
        resource_group: str,
        cluster: str,
        pool: str,
        parameters: aks_models.AgentPool,
        wait: bool = True,
    ) -> aks_models.AgentPool | None:
        client = self._get_container_client()
        log.info("agent_pool_update_requested", resource_group=resource_group, cluster=cluster, pool=pool)
        poller = client.agent_pools.begin_create_or_update(resource_group, cluster, pool, parameters)
        if not wait:
            return None
        return poller.result()

    def delete_agent_pool(self, resource_group: str, cluster: str, pool: str, wait: bool = True) -> None:
        client = self._get_container_client()
        log.info("agent_pool_delete_requested", resource_group=resource_group, cluster=cluster, pool=pool)
        poller = client.agent_pools.begin_delete(resource_group, cluster, pool)
        if wait:
            poller.result()

    # --- Generic resources ---

    def get_resource_group_location(self, resource_group: str) -> str:
        client = self._get_resource_client()
        try:
            return client.resource_groups.get(resource_group).location
        except Exception:
            log.error("failed_to_get_resource_group", resource_group=resource_group)
            raise

    def list_resources(self, resource_group: str) -> list[Any]:
        """List every Azure resource in a resource group."""
        client = self._get_resource_client()
        try:
            return list(client.resources.list_by_resource_group(resource_group))
        except Exception:
            log.error("failed_to_list_resources", resource_group=resource_group)
            raise
