"""AKS clusters on Azure subscriptions and resource groups, with kubectl, helm and docker wrappers."""

from azure_containers.clients.graph import AppRegistration, GraphClient
from azure_containers.docker import DockerEngine
from azure_containers.kubernetes_cluster import KubernetesCluster
from azure_containers.kubernetes_service import KubernetesService
from azure_containers.models import AgentPool, ServicePrincipal, aks_pools
from azure_containers.resource_group import AzureResourceGroup
from azure_containers.retry import create_with_retry, is_service_principal_error
from azure_containers.subscription import AzureSubscription

__all__ = [
    "AgentPool",
    "AppRegistration",
    "AzureResourceGroup",
    "AzureSubscription",
    "DockerEngine",
    "GraphClient",
    "KubernetesCluster",
    "KubernetesService",
    "ServicePrincipal",
    "aks_pools",
    "create_with_retry",
    "is_service_principal_error",
]
