"""MCP server exposing read-only AKS inspection tools over configured resource groups."""

from __future__ import annotations

import asyncio
import json
import sys
import time
from collections.abc import Callable

import structlog
from mcp.server.fastmcp import FastMCP

from azure_containers.config import load_group_map, resolve_group, validate_group_config
from azure_containers.models import scrub_sensitive_values
from azure_containers.resource_group import AzureResourceGroup
from azure_containers.subscription import AzureSubscription
from azure_containers.validation import validate_cluster_name

# Configure structlog for JSON output to stderr
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer() if sys.stderr.isatty() else structlog.processors.JSONRenderer(),
    ],
    logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
)

log = structlog.get_logger()

mcp = FastMCP("Azure Containers MCP Server")

_SUBSCRIPTIONS: dict[str, AzureSubscription] = {}


def _resource_group(group_id: str) -> AzureResourceGroup:
    config = resolve_group(group_id)
    subscription = _SUBSCRIPTIONS.get(config.subscription_id)
    if subscription is None:
        subscription = AzureSubscription(config.subscription_id)
        _SUBSCRIPTIONS[config.subscription_id] = subscription
    return AzureResourceGroup(subscription, config.resource_group, config.location)


def _list_clusters(group_id: str) -> str:
    clusters = _resource_group(group_id).list_aks()
    return json.dumps([svc.summary().model_dump() for svc in clusters.values()], indent=2)


def _get_cluster(group_id: str, name: str) -> str:
    validate_cluster_name(name)
    return _resource_group(group_id).get_aks(name).summary().model_dump_json(indent=2)


def _list_versions(group_id: str) -> str:
    return json.dumps(_resource_group(group_id).list_kubernetes_versions())


def _list_agent_pools(group_id: str, name: str) -> str:
    validate_cluster_name(name)
    pools = _resource_group(group_id).get_aks(name).list_agent_pools()
    return json.dumps([pool.as_dict() for pool in pools], indent=2, default=str)


async def _run_tool(tool: str, group: str, func: Callable[..., str], *args: str) -> str:
    start = time.monotonic()
    try:
        output = scrub_sensitive_values(await asyncio.to_thread(func, group, *args))
        log.info("tool_completed", tool=tool, group=group, latency_ms=_elapsed_ms(start))
        return output
    except Exception as e:
        sanitised = scrub_sensitive_values(str(e))
        log.error("tool_failed", tool=tool, group=group, error=sanitised)
        raise RuntimeError(sanitised) from None


@mcp.tool()
async def list_aks_clusters(group: str) -> str:
    """List AKS clusters in a configured resource group.

    Returns name, location, Kubernetes version, provisioning state and agent pools per cluster.

    Args:
        group: Resource group profile ID from groups.yaml.
    """
    return await _run_tool("list_aks_clusters", group, _list_clusters)


@mcp.tool()
async def get_aks_cluster(group: str, name: str) -> str:
    """Get the state of one AKS cluster.

    Args:
        group: Resource group profile ID from groups.yaml.
        name: Cluster name.
    """
    return await _run_tool("get_aks_cluster", group, _get_cluster, name)


@mcp.tool()
async def list_kubernetes_versions(group: str) -> str:
    """List Kubernetes versions available for new clusters in the group's region, oldest first.

    Args:
        group: Resource group profile ID from groups.yaml.
    """
    return await _run_tool("list_kubernetes_versions", group, _list_versions)


@mcp.tool()
async def list_agent_pools(group: str, name: str) -> str:
    """List the agent pools of an AKS cluster with size, count, mode and version.

    Args:
        group: Resource group profile ID from groups.yaml.
        name: Cluster name.
    """
    return await _run_tool("list_agent_pools", group, _list_agent_pools, name)


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def main() -> None:
    load_group_map()
    validate_group_config()
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
