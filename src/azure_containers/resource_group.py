"""Resource-group-level AKS operations: create, get, list and delete managed clusters."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

import structlog

from azure_containers.clients.azure_aks import MANAGED_CLUSTER_TYPE
from azure_containers.clients.graph import AppRegistration, GraphClient
from azure_containers.config import get_retry_config
from azure_containers.kubernetes_service import KubernetesService
from azure_containers.models import AgentPool, ServicePrincipal, aks_pools
from azure_containers.retry import create_with_retry, is_service_principal_error
from azure_containers.utils import deep_merge
from azure_containers.validation import default_dns_prefix, validate_cluster_name

if TYPE_CHECKING:
    from azure_containers.subscription import AzureSubscription

log = structlog.get_logger()

ServicePrincipalInput = ServicePrincipal | AppRegistration | Sequence[str] | None


def find_app_creds(
    credentials: ServicePrincipalInput,
    name: str,
    location: str,
    graph: Callable[[], GraphClient],
) -> ServicePrincipal:
    """Resolve the cluster's service principal, creating one through Graph if none is given.

    Accepts a ServicePrincipal, an AppRegistration with a password, or an
    ``(app_id, secret)`` pair.
    """
    creds: ServicePrincipal | None = None
    if credentials is None:
        display_name = f"aksapp-{name}-{location}"
        log.info("creating_cluster_service_principal", display_name=display_name)
        app = graph().create_app(display_name)
        if app.password:
            creds = ServicePrincipal(app_id=app.app_id, secret=app.password)
    elif isinstance(credentials, ServicePrincipal):
        creds = credentials
    elif isinstance(credentials, AppRegistration):
        if credentials.password:
            creds = ServicePrincipal(app_id=credentials.app_id, secret=credentials.password)
    elif not isinstance(credentials, str) and len(credentials) == 2 and all(credentials):
        creds = ServicePrincipal(app_id=str(credentials[0]), secret=str(credentials[1]))

    if creds is None or not creds.secret:
        msg = "Invalid service principal credentials: must supply app ID and password"
        raise ValueError(msg)
    return creds


def build_cluster_body(
    location: str,
    dns_prefix: str,
    kubernetes_version: str,
    agent_pools: Sequence[AgentPool],
    enable_rbac: bool = False,
    service_principal: ServicePrincipal | None = None,
    managed_identity: bool = False,
    login_user: str = "",
    login_passkey: str = "",
    properties: dict[str, Any] | None = None,
    **kwargs: Any,
) -> dict[str, Any]:
    """Assemble the ARM JSON body for a managed cluster PUT.

    ``properties`` is merged over the generated properties last; ``kwargs``
    become top-level fields such as ``tags``.
    """
    props: dict[str, Any] = {
        "kubernetesVersion": kubernetes_version,
        "dnsPrefix": dns_prefix,
        "agentPoolProfiles": [pool.to_arm() for pool in agent_pools],
        "enableRBAC": enable_rbac,
    }
    if service_principal is not None:
        props["servicePrincipalProfile"] = service_principal.to_arm()
    if login_user and login_passkey:
        props["linuxProfile"] = {
            "adminUsername": login_user,
            "ssh": {"publicKeys": [{"keyData": login_passkey}]},
        }
    props = deep_merge(props, properties or {})

    body: dict[str, Any] = {"type": MANAGED_CLUSTER_TYPE, "location": location, "properties": props}
    if managed_identity:
        body["identity"] = {"type": "SystemAssigned"}
    body.update(kwargs)
    return body


class AzureResourceGroup:
    """An Azure resource group within a subscription."""

    def __init__(self, subscription: AzureSubscription, name: str, location: str) -> None:
        self.subscription = subscription
        self.name = name
        self.location = location

    def __repr__(self) -> str:
        return f"<Azure resource group {self.name!r} ({self.location})>"

    def create_aks(
        self,
        name: str,
        location: str | None = None,
        dns_prefix: str | None = None,
        kubernetes_version: str | None = None,
        login_user: str = "",
        login_passkey: str = "",
        enable_rbac: bool = False,
        agent_pools: Sequence[AgentPool] | None = None,
        cluster_service_principal: ServicePrincipalInput = None,
        managed_identity: bool = False,
        properties: dict[str, Any] | None = None,
        wait: bool = True,
        **kwargs: Any,
    ) -> KubernetesService:
        """Create an AKS cluster in this resource group.

        Args:
            name: Cluster name.
            location: Region; defaults to the resource group's location.
            dns_prefix: Prefix for the API server FQDN; defaults to the cluster
                name, and an empty string derives one from the subscription.
            kubernetes_version: Defaults to the newest version available.
            login_user: Admin user name for SSH access to Linux nodes.
            login_passkey: Public key for ``login_user``.
            enable_rbac: Enable Kubernetes role-based access control.
            agent_pools: Pool definitions, see ``aks_pools``. Defaults to one
                pool of 3 nodes.
            cluster_service_principal: Service principal AKS uses to manage Azure
                resources. When omitted, a new one is created through Microsoft
                Graph unless ``managed_identity`` is set.
            managed_identity: Give the cluster a system-assigned managed identity.
            properties: Further ARM properties, merged over the generated ones.
            wait: Block until provisioning completes.
            **kwargs: Extra top-level fields of the request body, e.g. ``tags``.

        A newly created service principal takes a while to become visible to
        Resource Manager, so the create call is retried while ARM reports it
        as missing.
        """
        validate_cluster_name(name)
        location = location or self.location
        if dns_prefix is None:
            dns_prefix = name
        elif not dns_prefix:
            dns_prefix = default_dns_prefix(name, self.name, self.subscription.id)
        if not kubernetes_version:
            kubernetes_version = self.list_kubernetes_versions()[-1]

        service_principal = None
        if cluster_service_principal is not None or not managed_identity:
            service_principal = find_app_creds(cluster_service_principal, name, location, self.subscription.graph)

        body = build_cluster_body(
            location=location,
            dns_prefix=dns_prefix,
            kubernetes_version=kubernetes_version,
            agent_pools=agent_pools or aks_pools("pool1", 3),
            enable_rbac=enable_rbac,
            service_principal=service_principal,
            managed_identity=managed_identity,
            login_user=login_user,
            login_passkey=login_passkey,
            properties=properties,
            **kwargs,
        )

        aks = self.subscription.aks
        retry = get_retry_config()
        cluster = create_with_retry(
            lambda: aks.create_or_update_cluster(self.name, name, body, wait=wait),
            is_transient=is_service_principal_error,
            max_attempts=retry.max_attempts,
            delay=retry.delay_seconds,
        )
        if cluster is None:
            cluster = aks.get_cluster(self.name, name)
        log.info("cluster_created", resource_group=self.name, cluster=name, state=cluster.provisioning_state)
        return KubernetesService(self.subscription, self.name, cluster)

    def get_aks(self, name: str) -> KubernetesService:
        cluster = self.subscription.aks.get_cluster(self.name, name)
        return KubernetesService(self.subscription, self.name, cluster)

    def delete_aks(
        self,
        name: str,
        confirm: bool = True,
        wait: bool = False,
        prompt: Callable[[str], str] = input,
    ) -> bool:
        return self.get_aks(name).delete(confirm=confirm, wait=wait, prompt=prompt)

    def list_aks(self) -> dict[str, KubernetesService]:
        """All AKS clusters in this resource group, keyed by name."""
        return {
            cluster.name: KubernetesService(self.subscription, self.name, cluster)
            for cluster in self.subscription.aks.list_clusters(self.name)
        }

    def list_kubernetes_versions(self) -> list[str]:
        return self.subscription.list_kubernetes_versions(self.location)

    def list_resources(self) -> list[Any]:
        return self.subscription.aks.list_resources(self.name)
