"""The AKS resource: cluster lifecycle, credentials, agent pools and password rotation.

This object represents the Azure resource, not the Kubernetes endpoint. Use
``get_cluster()`` to obtain a ``KubernetesCluster`` for deploying workloads.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import timedelta
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog
from azure.mgmt.containerservice import models as aks_models

from azure_containers.config import default_kubeconfig_path, kube_default_config
from azure_containers.kubernetes_cluster import KubernetesCluster
from azure_containers.models import AgentPool, AgentPoolSummary, ClusterSummary
from azure_containers.utils import confirm_action
from azure_containers.validation import validate_credential_role, validate_node_pool

if TYPE_CHECKING:
    from azure_containers.clients.graph import GraphClient
    from azure_containers.subscription import AzureSubscription

log = structlog.get_logger()

# marker for "use the per-cluster kubeconfig file"; None means ~/.kube/config
DEFAULT_KUBECONFIG: Any = object()


class KubernetesService:
    """An Azure Kubernetes Service managed cluster resource."""

    def __init__(
        self,
        subscription: AzureSubscription,
        resource_group: str,
        cluster: aks_models.ManagedCluster,
    ) -> None:
        self.subscription = subscription
        self.resource_group = resource_group
        self.cluster = cluster

    def __repr__(self) -> str:
        return f"<AKS cluster {self.name!r} in {self.resource_group!r}: {self.provisioning_state}>"

    @property
    def name(self) -> str:
        return self.cluster.name

    @property
    def id(self) -> str | None:
        return self.cluster.id

    @property
    def location(self) -> str | None:
        return self.cluster.location

    @property
    def provisioning_state(self) -> str | None:
        return self.cluster.provisioning_state

    @property
    def properties(self) -> dict[str, Any]:
        """The cluster's ARM ``properties`` block as plain JSON."""
        return self.cluster.serialize(keep_readonly=True).get("properties", {})

    def sync_fields(self) -> str | None:
        """Refresh from Azure and return the provisioning state."""
        self.cluster = self.subscription.aks.get_cluster(self.resource_group, self.name)
        return self.provisioning_state

    def is_provisioned(self) -> bool:
        return self.sync_fields() == "Succeeded"

    def summary(self) -> ClusterSummary:
        return ClusterSummary(
            name=self.name,
            location=self.location,
            kubernetes_version=self.cluster.kubernetes_version,
            provisioning_state=self.provisioning_state,
            fqdn=self.cluster.fqdn,
            node_resource_group=self.cluster.node_resource_group,
            agent_pools=[
                AgentPoolSummary(
                    name=p.name,
                    count=p.count,
                    vm_size=p.vm_size,
                    os_type=p.os_type,
                    mode=p.mode,
                    orchestrator_version=p.current_orchestrator_version or p.orchestrator_version,
                    provisioning_state=p.provisioning_state,
                )
                for p in self.cluster.agent_pool_profiles or []
            ],
        )

    def delete(self, confirm: bool = True, wait: bool = False, prompt: Callable[[str], str] = input) -> bool:
        """Delete the cluster. Returns False if the user declines the confirmation."""
        if confirm and not confirm_action(
            f"Do you really want to delete the AKS cluster '{self.name}'?", prompt=prompt
        ):
            return False
        self.subscription.aks.delete_cluster(self.resource_group, self.name, wait=wait)
        return True

    def update_tags(self, tags: dict[str, str]) -> None:
        self.cluster = self.subscription.aks.update_cluster_tags(self.resource_group, self.name, tags)

    # --- Kubernetes endpoint ---

    def get_cluster(self, config: str | Path | None = DEFAULT_KUBECONFIG, role: str = "User") -> KubernetesCluster:
        """Download the cluster's kubeconfig and return the cluster endpoint.

        Args:
            config: File to write the kubeconfig to. Defaults to a per-cluster file
                in the configuration directory; pass None to use ``~/.kube/config``.
                An existing file is overwritten.
            role: ``"User"`` or ``"Admin"`` credentials.
        """
        validate_credential_role(role)
        if config is DEFAULT_KUBECONFIG:
            config = default_kubeconfig_path(self.name)
        elif config is None:
            config = kube_default_config()
        path = Path(config)

        profile = self.subscription.aks.list_cluster_credentials(self.resource_group, self.name, role)

        if path.exists():
            log.info("kubeconfig_overwrite", cluster=self.name, path=str(path))
        else:
            path.parent.mkdir(parents=True, exist_ok=True)
            log.info("kubeconfig_store", cluster=self.name, path=str(path))
        path.write_bytes(profile)
        return KubernetesCluster(path)

    def list_cluster_resources(self) -> list[Any]:
        """All Azure resources (VMs, disks, networking) managed by the cluster."""
        node_group = self.cluster.node_resource_group
        if not node_group:
            self.sync_fields()
            node_group = self.cluster.node_resource_group
        return self.subscription.aks.list_resources(node_group)

    def get_upgrade_profile(self) -> dict[str, Any]:
        return self.subscription.aks.get_upgrade_profile(self.resource_group, self.name)

    # --- Credentials ---

    def update_service_password(
        self,
        name: str | None = None,
        duration: timedelta | None = None,
        graph: GraphClient | None = None,
    ) -> str:
        """Add a new password to the cluster's service principal and hand it to AKS.

        ``graph`` authenticates to Microsoft Graph, which updates the app; it
        defaults to a client using the subscription's credential.
        """
        profile = self.cluster.service_principal_profile
        if profile is None or not profile.client_id or profile.client_id == "msi":
            msg = f"Cluster '{self.name}' does not use a service principal."
            raise RuntimeError(msg)

        graph = graph or self.subscription.graph()
        app = graph.get_app(profile.client_id)
        secret = graph.add_password(app, name, duration)

        self.subscription.aks.reset_service_principal(self.resource_group, self.name, profile.client_id, secret)
        self.sync_fields()
        return secret

    def update_aad_password(
        self,
        name: str | None = None,
        duration: timedelta | None = None,
        graph: GraphClient | None = None,
    ) -> str:
        """Add a new password to the AAD integration server app and hand it to AKS."""
        profile = self.cluster.aad_profile
        if profile is None:
            msg = "No Azure Active Directory profile associated with this cluster"
            raise RuntimeError(msg)
        if not profile.server_app_id:
            msg = (
                f"Cluster '{self.name}' uses managed Azure Active Directory integration, "
                "which has no server app password."
            )
            raise RuntimeError(msg)

        graph = graph or self.subscription.graph()
        app = graph.get_app(profile.server_app_id)
        secret = graph.add_password(app, name, duration)
        profile.server_app_secret = secret

        self.subscription.aks.reset_aad_profile(self.resource_group, self.name, profile)
        self.sync_fields()
        return secret

    # --- Agent pools ---

    def list_agent_pools(self) -> list[aks_models.AgentPool]:
        return self.subscription.aks.list_agent_pools(self.resource_group, self.name)

    def get_agent_pool(self, name: str) -> aks_models.AgentPool:
        validate_node_pool(name)
        return self.subscription.aks.get_agent_pool(self.resource_group, self.name, name)

    def create_agent_pool(self, pool: AgentPool, wait: bool = True) -> aks_models.AgentPool | None:
        validate_node_pool(pool.name)
        parameters = aks_models.AgentPool(
            count=pool.count,
            vm_size=pool.vm_size,
            os_type=pool.os_type,
            mode=pool.mode,
        )
        return self.subscription.aks.create_or_update_agent_pool(
            self.resource_group, self.name, pool.name, parameters, wait=wait
        )

    def scale_agent_pool(self, name: str, count: int, wait: bool = True) -> aks_models.AgentPool | None:
        if count < 0:
            msg = f"Agent pool count must be non-negative, got {count}"
            raise ValueError(msg)
        existing = self.get_agent_pool(name)
        existing.count = count
        return self.subscription.aks.create_or_update_agent_pool(
            self.resource_group, self.name, name, existing, wait=wait
        )

    def delete_agent_pool(self, name: str, wait: bool = True) -> None:
        validate_node_pool(name)
        self.subscription.aks.delete_agent_pool(self.resource_group, self.name, name, wait=wait)
