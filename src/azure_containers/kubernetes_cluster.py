"""Kubernetes cluster endpoint: kubectl and helm driven through a kubeconfig file."""

from __future__ import annotations

import shlex
import subprocess
from pathlib import Path

from kubernetes import client as k8s_client

from azure_containers.cli_tools import call_cli
from azure_containers.clients import load_k8s_api_client


class KubernetesCluster:
    """A Kubernetes cluster reachable through a kubeconfig file."""

    def __init__(self, config: str | Path, context: str | None = None) -> None:
        self.config = Path(config)
        self.context = context
        self._api_client: k8s_client.ApiClient | None = None

    def __repr__(self) -> str:
        return f"KubernetesCluster(config={str(self.config)!r})"

    def _global_args(self) -> list[str]:
        args = ["--kubeconfig", str(self.config)]
        if self.context:
            args += ["--context", self.context]
        return args

    def kubectl(self, cmd: str | list[str], echo: bool = True) -> subprocess.CompletedProcess[str]:
        args = shlex.split(cmd) if isinstance(cmd, str) else list(cmd)
        return call_cli("kubectl", [*args, *self._global_args()], echo=echo)

    def helm(self, cmd: str | list[str]) -> subprocess.CompletedProcess[str]:
        args = shlex.split(cmd) if isinstance(cmd, str) else list(cmd)
        helm_args = ["--kubeconfig", str(self.config)]
        if self.context:
            helm_args += ["--kube-context", self.context]
        return call_cli("helm", [*args, *helm_args])

    def create(self, file: str | Path) -> subprocess.CompletedProcess[str]:
        return self.kubectl(["create", "-f", str(file)])

    def apply(self, file: str | Path) -> subprocess.CompletedProcess[str]:
        return self.kubectl(["apply", "-f", str(file)])

    def delete(self, resource_type: str, name: str) -> subprocess.CompletedProcess[str]:
        return self.kubectl(["delete", resource_type, name])

    def get(self, resource_type: str, namespace: str | None = None) -> subprocess.CompletedProcess[str]:
        args = ["get", resource_type]
        if namespace:
            args += ["--namespace", namespace]
        return self.kubectl(args)

    def create_registry_secret(
        self,
        server: str,
        username: str,
        password: str,
        secret_name: str | None = None,
        email: str | None = None,
    ) -> subprocess.CompletedProcess[str]:
        """Store container registry credentials as a docker-registry secret."""
        args = [
            "create",
            "secret",
            "docker-registry",
            secret_name or server.split(".")[0],
            f"--docker-server={server}",
            f"--docker-username={username}",
            f"--docker-password={password}",
        ]
        if email:
            args.append(f"--docker-email={email}")
        return self.kubectl(args, echo=False)

    def api_client(self) -> k8s_client.ApiClient:
        """Kubernetes python client bound to this cluster's kubeconfig."""
        if self._api_client is None:
            self._api_client = load_k8s_api_client(self.config, self.context)
        return self._api_client
