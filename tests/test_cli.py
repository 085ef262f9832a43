"""Tests for the command-line interface."""

from unittest.mock import Mock

import pytest

from colregistry.cli import build_parser, main, run_command
from colregistry.registry import (
    MaintenanceReport,
    MatchType,
    ReconcileResult,
    ReconcileStatus,
    RegistryEntry,
)


class TestParser:
    """Test argument parsing."""

    def test_update(self):
        args = build_parser().parse_args(["-s", "abc", "update", "S1"])

        assert args.command == "update"
        assert args.script == "S1"
        assert args.spreadsheet == "abc"

    def test_lookup_variable_is_optional(self):
        args = build_parser().parse_args(["lookup", "S1"])
        assert args.variable is None

    def test_register_options(self):
        args = build_parser().parse_args(
            ["--headless", "register", "S1", "v1", "Sheet1", "--header", "Amount", "--position", "3"]
        )

        assert args.headless is True
        assert (args.script, args.variable, args.sheet) == ("S1", "v1", "Sheet1")
        assert args.header == "Amount"
        assert args.position == 3

    def test_no_command_exits(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 1


class TestRunCommand:
    """Test dispatch of parsed commands to the registry."""

    def test_update_prints_results(self, capsys):
        registry = Mock()
        entry = RegistryEntry(script="S1", variable="v1", sheet_name="Sheet1", position=3)
        registry.update_columns.return_value = [
            ReconcileResult(
                entry=entry,
                status=ReconcileStatus.UPDATED,
                match_type=MatchType.TOOLTIP,
                old_position=2,
                new_position=3,
            )
        ]

        run_command(registry, build_parser().parse_args(["update", "S1"]))

        registry.update_columns.assert_called_once_with("S1")
        assert capsys.readouterr().out == "S1:v1: updated (2 -> 3)\n"

    def test_lookup_single(self, capsys):
        registry = Mock()
        registry.get_column_position.return_value = 4

        run_command(registry, build_parser().parse_args(["lookup", "S1", "v1"]))

        registry.get_column_position.assert_called_once_with("S1", "v1")
        assert capsys.readouterr().out == "4\n"

    def test_lookup_script(self, capsys):
        registry = Mock()
        registry.get_column_positions.return_value = {"a": 1, "b": -1}

        run_command(registry, build_parser().parse_args(["lookup", "S1"]))

        assert capsys.readouterr().out == "a\t1\nb\t-1\n"

    def test_maintain_headless_prints_summary(self, capsys):
        registry = Mock()
        registry.prompt = None
        registry.perform_registry_maintenance.return_value = MaintenanceReport(cancelled=True)

        run_command(registry, build_parser().parse_args(["maintain"]))

        assert capsys.readouterr().out == "✓ Maintenance cancelled\n"

    def test_maintain_interactive_leaves_summary_to_prompt(self, capsys):
        registry = Mock()
        registry.perform_registry_maintenance.return_value = MaintenanceReport()

        run_command(registry, build_parser().parse_args(["maintain"]))

        assert capsys.readouterr().out == ""

    def test_register(self, capsys):
        registry = Mock()
        registry.register_entry.return_value = RegistryEntry(script="S1", variable="v1")

        run_command(
            registry, build_parser().parse_args(["register", "S1", "v1", "Sheet1", "--position", "2"])
        )

        registry.register_entry.assert_called_once_with("S1", "v1", "Sheet1", "", 2)
        assert capsys.readouterr().out == "Registered S1:v1\n"


def test_main_reports_errors(monkeypatch, capsys):
    monkeypatch.setattr(
        "colregistry.cli.create_registry", Mock(side_effect=RuntimeError("no access"))
    )

    with pytest.raises(SystemExit) as exc_info:
        main(["update", "S1"])

    assert exc_info.value.code == 1
    assert "Error: no access" in capsys.readouterr().out
