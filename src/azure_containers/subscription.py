"""Subscription-level AKS operations."""

from __future__ import annotations

import threading

from azure.core.credentials import TokenCredential

from azure_containers.clients import get_default_credential
from azure_containers.clients.azure_aks import AzureAksClient, resource_group_from_id
from azure_containers.clients.graph import GraphClient
from azure_containers.kubernetes_service import KubernetesService
from azure_containers.resource_group import AzureResourceGroup


class AzureSubscription:
    """An Azure subscription, the entry point for resource groups and clusters.

    The credential is used for every Resource Manager and Graph call made
    through this object and the objects it returns.
    """

    def __init__(self, subscription_id: str, credential: TokenCredential | None = None) -> None:
        self.id = subscription_id
        self.credential = credential or get_default_credential()
        self.aks = AzureAksClient(subscription_id, self.credential)
        self._graph: GraphClient | None = None
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"<Azure subscription {self.id}>"

    def graph(self) -> GraphClient:
        with self._lock:
            if self._graph is None:
                self._graph = GraphClient(self.credential)
            return self._graph

    def get_resource_group(self, name: str, location: str | None = None) -> AzureResourceGroup:
        """Return a resource group; its location is looked up when not given."""
        if location is None:
            location = self.aks.get_resource_group_location(name)
        return AzureResourceGroup(self, name, location)

    def list_aks(self) -> dict[str, KubernetesService]:
        """All AKS clusters in the subscription, keyed by name."""
        return {
            cluster.name: KubernetesService(self, resource_group_from_id(cluster.id) or "", cluster)
            for cluster in self.aks.list_clusters()
        }

    def list_kubernetes_versions(self, location: str) -> list[str]:
        """Kubernetes versions that can be used for a new cluster in ``location``, oldest first."""
        return self.aks.list_kubernetes_versions(location)
