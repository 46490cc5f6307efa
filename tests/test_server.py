"""Tests for server.py: FastMCP initialization, tool registration, entry point."""

from __future__ import annotations

from unittest.mock import patch

from azure_containers import server
from azure_containers.server import mcp

EXPECTED_TOOLS = {"list_aks_clusters", "get_aks_cluster", "list_kubernetes_versions", "list_agent_pools"}


class TestServerInitialization:
    def test_server_name(self) -> None:
        assert mcp.name == "Azure Containers MCP Server"

    def test_all_tools_registered(self) -> None:
        tool_names = {tool.name for tool in mcp._tool_manager.list_tools()}
        assert EXPECTED_TOOLS.issubset(tool_names), f"Missing tools: {EXPECTED_TOOLS - tool_names}"

    def test_tools_have_descriptions(self) -> None:
        for tool in mcp._tool_manager.list_tools():
            assert tool.description, f"Tool {tool.name} has no description"

    def test_group_parameter_required(self) -> None:
        for tool in mcp._tool_manager.list_tools():
            assert "group" in tool.parameters["required"], tool.name


class TestMain:
    def test_validates_config_then_runs_stdio(self) -> None:
        with (
            patch.object(server, "load_group_map") as mock_load,
            patch.object(server, "validate_group_config") as mock_validate,
            patch.object(server.mcp, "run") as mock_run,
        ):
            server.main()
        mock_load.assert_called_once_with()
        mock_validate.assert_called_once_with()
        mock_run.assert_called_once_with(transport="stdio")
