"""Tests for the geolocation client, persistence sinks and the CLI."""

from __future__ import annotations

import json
import logging

import httpx
from click.testing import CliRunner

from store_boundary import geolocation
from store_boundary.cli import cli
from store_boundary.config import GeolocationConfig
from store_boundary.geolocation import IPGeolocationClient
from store_boundary.models import BoundarySnapshot, Coordinate
from store_boundary.sinks import JsonFileSink, LogSink

RING_ARGS = [
    "--point", "51.52,-0.10",
    "--point", "51.505,-0.07",
    "--point", "51.485,-0.08",
    "--point", "51.485,-0.12",
    "--point", "51.505,-0.13",
]


def _geo_config(**overrides) -> GeolocationConfig:
    defaults = dict(
        name="test-geo",
        url="https://geo.example/json",
        timeout_seconds=1.0,
        max_retries=0,
        retry_backoff_base=2.0,
        enabled=True,
    )
    defaults.update(overrides)
    return GeolocationConfig(**defaults)


def _client(handler, **overrides) -> IPGeolocationClient:
    return IPGeolocationClient(_geo_config(**overrides), transport=httpx.MockTransport(handler))


# ── Geolocation tests ────────────────────────────────────────────────────


class TestGeolocation:
    def test_locate(self):
        def handler(request):
            assert request.url == "https://geo.example/json"
            return httpx.Response(200, json={"latitude": 48.85, "longitude": 2.35, "city": "Paris"})

        with _client(handler) as client:
            assert client.locate() == Coordinate(48.85, 2.35)

    def test_string_coordinates(self):
        def handler(request):
            return httpx.Response(200, json={"latitude": "48.85", "longitude": "2.35"})

        with _client(handler) as client:
            assert client.locate() == Coordinate(48.85, 2.35)

    def test_missing_fields(self):
        def handler(request):
            return httpx.Response(200, json={"error": True, "reason": "RateLimited"})

        with _client(handler) as client:
            assert client.locate() is None

    def test_out_of_range(self):
        def handler(request):
            return httpx.Response(200, json={"latitude": 123.0, "longitude": 2.35})

        with _client(handler) as client:
            assert client.locate() is None

    def test_not_json(self):
        def handler(request):
            return httpx.Response(200, text="<html>nope</html>")

        with _client(handler) as client:
            assert client.locate() is None

    def test_disabled(self):
        def handler(request):
            raise AssertionError("no request expected")

        with _client(handler, enabled=False) as client:
            assert client.locate() is None

    def test_retries_then_succeeds(self, monkeypatch):
        sleeps = []
        monkeypatch.setattr(geolocation.time, "sleep", sleeps.append)
        calls = {"n": 0}

        def handler(request):
            calls["n"] += 1
            if calls["n"] < 3:
                return httpx.Response(503)
            return httpx.Response(200, json={"latitude": 1.0, "longitude": 2.0})

        with _client(handler, max_retries=2) as client:
            assert client.locate() == Coordinate(1.0, 2.0)
        assert calls["n"] == 3
        assert sleeps == [1.0, 2.0]

    def test_all_attempts_fail(self, monkeypatch, caplog):
        monkeypatch.setattr(geolocation.time, "sleep", lambda _: None)

        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        with caplog.at_level(logging.WARNING, logger="store_boundary.geolocation"):
            with _client(handler, max_retries=1) as client:
                assert client.locate() is None
        assert any("attempt 1/2 failed" in r.getMessage() for r in caplog.records)
        assert any("all 2 attempts failed" in r.getMessage() for r in caplog.records)


# ── Sink tests ───────────────────────────────────────────────────────────


def _snapshot() -> BoundarySnapshot:
    return BoundarySnapshot(
        center=Coordinate(51.5, -0.10),
        vertices=(
            Coordinate(51.52, -0.10),
            Coordinate(51.505, -0.07),
            Coordinate(51.485, -0.08),
            Coordinate(51.485, -0.12),
            Coordinate(51.505, -0.13),
        ),
        store_name="Cafe",
    )


class TestSinks:
    def test_json_file_sink(self, tmp_path):
        path = tmp_path / "nested" / "boundary.json"
        JsonFileSink(path).save(_snapshot())
        assert BoundarySnapshot.from_json(path.read_text()) == _snapshot()

    def test_json_file_sink_overwrites(self, tmp_path):
        path = tmp_path / "boundary.json"
        path.write_text("stale")
        JsonFileSink(path).save(_snapshot())
        assert json.loads(path.read_text())["store_name"] == "Cafe"

    def test_log_sink(self, caplog):
        with caplog.at_level(logging.INFO, logger="store_boundary.sinks"):
            LogSink().save(_snapshot())
        assert any("Cafe" in r.getMessage() and "51.52" in r.getMessage() for r in caplog.records)


# ── CLI tests ────────────────────────────────────────────────────────────


class TestCheckCommand:
    def test_valid_boundary(self, tmp_path):
        out = tmp_path / "boundary.json"
        result = CliRunner().invoke(cli, [
            "check", "--center", "51.5,-0.10", "--radius", "5000",
            "--name", "Cafe", "--out", str(out), *RING_ARGS,
        ])
        assert result.exit_code == 0, result.output
        assert "Success! Store saved." in result.output
        saved = BoundarySnapshot.from_json(out.read_text())
        assert saved.store_name == "Cafe"
        assert len(saved.vertices) == 5

    def test_incomplete_boundary(self):
        result = CliRunner().invoke(cli, [
            "check", "--center", "51.5,-0.10", *RING_ARGS[:8],
        ])
        assert result.exit_code == 1
        assert "Set polygon with 5 points." in result.output

    def test_center_outside(self):
        result = CliRunner().invoke(cli, [
            "check", "--center", "51.5,-0.10",
            "--point", "51.51,-0.11",
            "--point", "51.51,-0.09",
            "--point", "51.52,-0.08",
            "--point", "51.53,-0.10",
            "--point", "51.52,-0.12",
        ])
        assert result.exit_code == 1
        assert "must be inside the polygon" in result.output

    def test_out_of_radius_reported(self):
        result = CliRunner().invoke(cli, [
            "check", "--center", "51.5,-0.10", "--radius", "5000",
            "--point", "51.554,-0.10",
        ])
        assert result.exit_code == 1
        assert "outside the allowed boundary" in result.output

    def test_invalid_coordinate_option(self):
        result = CliRunner().invoke(cli, ["check", "--center", "95,0"])
        assert result.exit_code == 2
        assert "latitude" in result.output

    def test_invalid_radius_option(self):
        result = CliRunner().invoke(cli, ["check", "--radius", "0"])
        assert result.exit_code == 2
        assert "must be positive" in result.output

    def test_non_finite_radius_option(self):
        for value in ("nan", "inf", "-inf"):
            result = CliRunner().invoke(cli, ["check", "--radius", value])
            assert result.exit_code == 2, value
            assert "not a finite number" in result.output
            assert result.exception is None or isinstance(result.exception, SystemExit)

    def test_non_numeric_radius_option(self):
        result = CliRunner().invoke(cli, ["check", "--radius", "far"])
        assert result.exit_code == 2
        assert "is not a number" in result.output

    def test_malformed_env_defaults(self, monkeypatch):
        monkeypatch.setenv("STORE_BOUNDARY_LAT", "north")
        result = CliRunner().invoke(cli, ["check"])
        assert result.exit_code == 2
        assert "Invalid STORE_BOUNDARY_* settings" in result.output
        assert isinstance(result.exception, SystemExit)

    def test_out_of_range_env_defaults(self, monkeypatch):
        monkeypatch.setenv("STORE_BOUNDARY_RADIUS_M", "-5")
        result = CliRunner().invoke(cli, ["draw"], input="quit\n")
        assert result.exit_code == 2
        assert "must be positive" in result.output

    def test_too_many_points_without_undo_hint(self):
        result = CliRunner().invoke(cli, [
            "check", "--center", "51.5,-0.10", *RING_ARGS, "--point", "51.5,-0.10",
        ])
        assert "Polygon can only have 5 points." in result.output
        assert "undo" not in result.output

    def test_locate_sets_center(self, monkeypatch):
        monkeypatch.setattr(
            "store_boundary.cli.locate_center", lambda config: Coordinate(48.85, 2.35)
        )
        result = CliRunner().invoke(cli, ["check", "--locate"])
        assert "48.850000, 2.350000" in result.output

    def test_locate_failure_keeps_default(self, monkeypatch):
        monkeypatch.setattr("store_boundary.cli.locate_center", lambda config: None)
        monkeypatch.delenv("STORE_BOUNDARY_LAT", raising=False)
        monkeypatch.delenv("STORE_BOUNDARY_LNG", raising=False)
        result = CliRunner().invoke(cli, ["check", "--locate"])
        assert "Could not determine location" in result.output
        assert "51.499882, -0.099249" in result.output


class TestDrawCommand:
    def _run(self, lines: list[str], *args: str):
        return CliRunner().invoke(
            cli, ["draw", "--center", "51.5,-0.10", "--radius", "5000", *args],
            input="\n".join(lines) + "\n",
        )

    def test_build_and_save(self, tmp_path):
        out = tmp_path / "boundary.json"
        result = self._run([
            "add 51.52,-0.10",
            "add 51.505,-0.07",
            "add 51.485,-0.08",
            "add 51.485,-0.12",
            "add 51.505,-0.13",
            "save",
            "quit",
        ], "--out", str(out))
        assert result.exit_code == 0, result.output
        assert result.output.count("Point added.") == 5
        assert "Success! Store saved." in result.output
        assert out.exists()

    def test_rejections_and_undo(self):
        result = self._run([
            "undo",
            "add 51.554,-0.10",
            "add 51.52,-0.10",
            "undo",
            "save",
        ])
        assert result.exit_code == 0
        assert "No points to undo." in result.output
        assert "outside the allowed boundary" in result.output
        assert "Removed last point." in result.output
        assert "Set polygon with 5 points." in result.output

    def test_too_many(self):
        result = self._run(["add 51.5,-0.10"] * 6)
        assert result.output.count("Point added.") == 5
        assert 'can only have 5 points. Use "undo" to adjust.' in result.output

    def test_zero_area_polygon_not_saved(self):
        result = self._run(["add 51.5,-0.10"] * 5 + ["save"])
        assert "must be inside the polygon" in result.output
        assert "Success! Store saved." not in result.output

    def test_settings_commands(self):
        result = self._run([
            "name Corner Shop",
            "radius 1500",
            "center 51.49,-0.11",
            "clear",
            "show",
        ])
        assert "Store renamed to 'Corner Shop'." in result.output
        assert "Radius set to 1.5 km." in result.output
        assert "Center moved to 51.490000, -0.110000." in result.output
        assert "Cleared all points." in result.output
        assert "Corner Shop" in result.output

    def test_bad_input_does_not_abort(self):
        result = self._run([
            "add",
            "add nonsense",
            "radius -3",
            "center 91,0",
            "frobnicate",
            "help",
            "add 51.52,-0.10",
        ])
        assert result.exit_code == 0
        assert "usage: add LAT,LNG" in result.output
        assert "must be positive" in result.output
        assert "Unknown command 'frobnicate'" in result.output
        assert "Commands:" in result.output
        assert "Point added." in result.output
