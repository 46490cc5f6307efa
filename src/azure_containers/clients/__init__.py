"""Client wrappers for Azure Resource Manager, Microsoft Graph, and Kubernetes APIs."""

from __future__ import annotations

from pathlib import Path

from azure.core.credentials import TokenCredential
from azure.identity import DefaultAzureCredential
from kubernetes import client as k8s_client
from kubernetes.config import new_client_from_config


def get_default_credential() -> TokenCredential:
    """Credential used when the caller does not pass one explicitly.

    DefaultAzureCredential tries environment variables, workload identity,
    managed identity and the Azure CLI token cache, in that order.
    """
    return DefaultAzureCredential()


def load_k8s_api_client(config_file: str | Path, context: str | None = None) -> k8s_client.ApiClient:
    """Create an isolated Kubernetes API client for a kubeconfig file.

    new_client_from_config leaves the global SDK configuration untouched, so
    clients for different clusters can coexist in one process.
    """
    return new_client_from_config(config_file=str(config_file), context=context)
