"""Tests for deep_merge and confirm_action."""

from __future__ import annotations

import pytest

from azure_containers.utils import confirm_action, deep_merge


class TestDeepMerge:
    def test_nested_dicts_merged(self) -> None:
        base = {"networkProfile": {"networkPlugin": "kubenet", "podCidr": "10.244.0.0/16"}, "enableRBAC": False}
        merged = deep_merge(base, {"networkProfile": {"networkPlugin": "azure"}})
        assert merged == {
            "networkProfile": {"networkPlugin": "azure", "podCidr": "10.244.0.0/16"},
            "enableRBAC": False,
        }
        assert base["networkProfile"]["networkPlugin"] == "kubenet"

    def test_none_removes_key(self) -> None:
        assert deep_merge({"a": 1, "b": 2}, {"b": None}) == {"a": 1}

    def test_non_dict_replaces(self) -> None:
        assert deep_merge({"a": {"x": 1}}, {"a": [1, 2]}) == {"a": [1, 2]}


class TestConfirmAction:
    @pytest.mark.parametrize(("answer", "expected"), [("y", True), ("YES", True), (" yes ", True), ("", False), ("no", False)])
    def test_answers(self, answer: str, expected: bool) -> None:
        assert confirm_action("Delete?", prompt=lambda _: answer) is expected
