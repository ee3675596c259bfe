from __future__ import annotations

import json
import shlex
from pathlib import Path

import pytest
from fakes import FakeController

from autostart_router.cli import main as cli_main
from autostart_router.routing import profiles

PKG = "com.example.newapplocker"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("AUTOSTART_ROUTER_SERIAL", raising=False)
    monkeypatch.delenv("AUTOSTART_ROUTER_ADB", raising=False)


def _use_fake(monkeypatch: pytest.MonkeyPatch, ctr: FakeController) -> None:
    monkeypatch.setattr(cli_main, "_controller", lambda cfg: ctr)


def test_profiles_lists_aliases(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_main.main(["profiles"]) == 0
    out = capsys.readouterr().out
    assert "xiaomi (redmi)" in out
    assert "oppo (realme)" in out


def test_route_dry_run_prints_plan(capsys: pytest.CaptureFixture[str]) -> None:
    rc = cli_main.main(["route", "--manufacturer", "Realme", "--package", PKG, "--dry-run"])
    assert rc == 0
    out = capsys.readouterr().out
    assert "profile: oppo" in out
    assert "[fallback_secondary]" in out


def test_route_reads_manufacturer_from_device(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    huawei = profiles.candidates_for("huawei", PKG)
    ctr = FakeController(
        props={"ro.product.manufacturer": "HONOR"},
        installed_components={huawei[0].component},
    )
    _use_fake(monkeypatch, ctr)
    assert cli_main.main(["route", "--package", PKG, "--json"]) == 0
    report = json.loads(capsys.readouterr().out)
    assert report["manufacturer"] == "honor"
    assert report["profile"] == "huawei"
    assert report["succeeded_with"] == huawei[0].component


def test_route_exit_code_when_exhausted(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    ctr = FakeController()
    _use_fake(monkeypatch, ctr)
    assert cli_main.main(["route", "--manufacturer", "unknownbrand", "--package", PKG]) == 1
    out = capsys.readouterr().out
    assert "grant auto-start manually" in out
    assert len([c for c in ctr.shell_cmds if shlex.split(c)[:2] == ["am", "start"]]) == 2


def test_route_uses_config_file_package(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    cfg = tmp_path / "router.yaml"
    cfg.write_text(f"package_name: {PKG}\n", encoding="utf-8")
    ctr = FakeController(resolvable_actions={profiles.ACTION_REQUEST_IGNORE_BATTERY_OPTIMIZATIONS})
    _use_fake(monkeypatch, ctr)
    rc = cli_main.main(["--config", str(cfg), "route", "--manufacturer", "nokia"])
    assert rc == 0
    assert f"package:{PKG}" in shlex.split(ctr.shell_cmds[0])


def test_route_without_package_is_a_config_error() -> None:
    with pytest.raises(SystemExit, match="package_name is required"):
        cli_main.main(["route", "--manufacturer", "vivo"])


def test_device_info(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    ctr = FakeController(
        props={
            "ro.product.manufacturer": "samsung",
            "ro.product.brand": "samsung",
            "ro.product.model": "SM-S911B",
            "ro.build.version.sdk": "34",
        }
    )
    _use_fake(monkeypatch, ctr)
    assert cli_main.main(["device-info"]) == 0
    assert capsys.readouterr().out.strip() == (
        "Manufacturer: samsung, Model: SM-S911B, Brand: samsung, SDK: 34"
    )


def test_open_screen(monkeypatch: pytest.MonkeyPatch) -> None:
    ctr = FakeController(resolvable_actions={"android.settings.USAGE_ACCESS_SETTINGS"})
    _use_fake(monkeypatch, ctr)
    assert cli_main.main(["open-screen", "usage_access", "--package", PKG]) == 0
    assert cli_main.main(["open-screen", "overlay", "--package", PKG]) == 1
