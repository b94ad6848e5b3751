"""Tests for finch.cli — ``finch routes`` and ``finch check``."""

import types

import pytest

from finch.app import Engine
from finch.auth.policy import Public
from finch.cli import main
from finch.declarations import EndpointDeclaration, ParameterSpec


def _register(monkeypatch: pytest.MonkeyPatch, engine: Engine) -> None:
    mod = types.ModuleType("_cli_test_engine")
    mod.engine = engine  # type: ignore[attr-defined]
    monkeypatch.setitem(__import__("sys").modules, "_cli_test_engine", mod)


def _engine() -> Engine:
    engine = Engine()
    engine.controller("Items", "/api/items")
    engine.add(
        EndpointDeclaration("Items", "get_item", "GET", "/{id}", params=(ParameterSpec.path("id", int),)),
        lambda id: id,
    )
    engine.add(EndpointDeclaration("Items", "health", "GET", "/health", auth=Public()), lambda: "ok")
    return engine


class TestRoutes:
    def test_lists_routes_in_match_order(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        _register(monkeypatch, _engine())
        main(["routes", "_cli_test_engine"])

        lines = capsys.readouterr().out.splitlines()
        assert lines[0].split() == ["METHOD", "PATH", "HANDLER", "AUTH", "RANK"]
        assert lines[2].split() == ["GET", "/api/items/health", "Items.health", "public", "0"]
        assert lines[3].split()[:3] == ["GET", "/api/items/{id}", "Items.get_item"]

    def test_empty_engine(self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
        _register(monkeypatch, Engine())
        main(["routes", "_cli_test_engine"])
        assert capsys.readouterr().out.strip() == "No routes registered."


class TestCheck:
    def test_clean(self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
        _register(monkeypatch, _engine())
        main(["check", "_cli_test_engine:engine"])
        assert capsys.readouterr().out.strip() == "OK: 2 route(s), no anomalies."

    def test_anomalies_exit_one(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        engine = _engine()
        engine.add(EndpointDeclaration("Items", "broken", None, "/broken"))
        _register(monkeypatch, engine)

        with pytest.raises(SystemExit) as exc_info:
            main(["check", "_cli_test_engine"])

        assert exc_info.value.code == 1
        captured = capsys.readouterr()
        assert "Items.broken: missing HTTP verb" in captured.out
        assert "1 anomaly found." in captured.err

    def test_invalid_import_string(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["check", "nonexistent_module_xyz:engine"])
        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err


class TestMain:
    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 0
        assert "routes" in capsys.readouterr().out
