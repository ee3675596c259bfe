from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Optional, Sequence

from autostart_router import screens
from autostart_router.config.store import ConfigStore, ConfigStoreError, RouterConfig
from autostart_router.routing import profiles
from autostart_router.routing.router import VendorPermissionRouter
from autostart_router.runtime.android.controller import (
    AndroidController,
    detect_single_device_serial,
)
from autostart_router.runtime.android.device_info import PROP_MANUFACTURER, read_device_info
from autostart_router.runtime.android.launcher import ActivityLauncher

logger = logging.getLogger(__name__)


def _json_dumps(obj: Any) -> str:
    return json.dumps(obj, indent=2, ensure_ascii=False)


def _load_config(args: argparse.Namespace, *, require_package: bool) -> RouterConfig:
    store = ConfigStore(args.config)
    try:
        with store:
            return store.load_config(
                require_package=require_package,
                package_name=getattr(args, "package", None),
                serial=args.serial,
                adb_path=args.adb_path,
                timeout_s=args.timeout_s,
                debug=True if args.debug else None,
            )
    except ConfigStoreError as e:
        raise SystemExit(f"config error: {e}") from e


def _controller(cfg: RouterConfig) -> AndroidController:
    serial = cfg.serial or detect_single_device_serial(adb_path=cfg.adb_path)
    return AndroidController(adb_path=cfg.adb_path, serial=serial, timeout_s=cfg.timeout_s)


def _print_plan(router: VendorPermissionRouter, manufacturer: str) -> None:
    key = profiles.profile_key(manufacturer)
    print(f"manufacturer: {profiles.normalize_manufacturer(manufacturer)} (profile: {key})")
    for idx, (stage, target) in enumerate(router.plan(manufacturer)):
        print(f"  {idx}. [{stage}] {target.describe()}")


def _cmd_route(args: argparse.Namespace) -> int:
    cfg = _load_config(args, require_package=True)
    _configure_logging(cfg.debug)

    controller: Optional[AndroidController] = None
    manufacturer = args.manufacturer
    if manufacturer is None:
        controller = _controller(cfg)
        manufacturer = controller.getprop(PROP_MANUFACTURER)
        logger.info("device manufacturer: %r", manufacturer)

    if args.dry_run:
        router = VendorPermissionRouter(launcher=None, package_name=cfg.package_name)
        _print_plan(router, manufacturer)
        return 0

    if controller is None:
        controller = _controller(cfg)
    launcher = ActivityLauncher(controller=controller, timeout_s=cfg.timeout_s)
    router = VendorPermissionRouter(launcher=launcher, package_name=cfg.package_name)
    report = router.dispatch(manufacturer)

    if args.json:
        print(_json_dumps(report.to_dict()))
    else:
        for attempt in report.attempts:
            suffix = f": {attempt.reason}" if attempt.reason else ""
            target = attempt.target.describe()
            print(f"[{attempt.stage}] {target} -> {attempt.result.value}{suffix}")
        if not report.launched:
            print("No settings screen could be opened; grant auto-start manually.")
    return 0 if report.launched else 1


def _cmd_device_info(args: argparse.Namespace) -> int:
    cfg = _load_config(args, require_package=False)
    _configure_logging(cfg.debug)
    info = read_device_info(_controller(cfg))
    if args.json:
        print(_json_dumps(info.to_dict()))
    else:
        print(info.summary())
    return 0


def _cmd_open_screen(args: argparse.Namespace) -> int:
    cfg = _load_config(args, require_package=True)
    _configure_logging(cfg.debug)
    launcher = ActivityLauncher(controller=_controller(cfg), timeout_s=cfg.timeout_s)
    return 0 if screens.open_screen(launcher, args.name, cfg.package_name) else 1


def _cmd_profiles(args: argparse.Namespace) -> int:  # noqa: ARG001
    for name in sorted(profiles.PROFILES):
        aliases = sorted(a for a, target in profiles.ALIASES.items() if target == name)
        label = name + (f" ({', '.join(aliases)})" if aliases else "")
        print(label)
        for target in profiles.PROFILES[name]:
            print(f"  - {target.describe()}")
    return 0


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="[%(levelname)s] %(name)s: %(message)s",
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Open vendor auto-start / battery optimization settings over adb."
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Optional YAML/JSON config file (package_name, adb_path, serial, timeout_s, debug).",
    )
    parser.add_argument("--serial", type=str, default=None, help="adb device serial.")
    parser.add_argument("--adb_path", type=str, default=None, help="adb binary (default: adb).")
    parser.add_argument("--timeout_s", type=float, default=None, help="Per-command timeout.")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    sub = parser.add_subparsers(dest="cmd", required=True)

    route_p = sub.add_parser("route", help="Open the best auto-start screen for the device.")
    route_p.add_argument(
        "--manufacturer",
        type=str,
        default=None,
        help="Override the manufacturer (default: ro.product.manufacturer).",
    )
    route_p.add_argument("--package", type=str, default=None, help="App package to exempt.")
    route_p.add_argument(
        "--dry_run",
        "--dry-run",
        dest="dry_run",
        action="store_true",
        help="Print the candidate screens without launching anything.",
    )
    route_p.add_argument("--json", action="store_true", help="Print the attempt report as JSON.")
    route_p.set_defaults(func=_cmd_route)

    info_p = sub.add_parser("device-info", help="Print manufacturer/model/brand/SDK.")
    info_p.add_argument("--json", action="store_true")
    info_p.set_defaults(func=_cmd_device_info)

    screen_p = sub.add_parser("open-screen", help="Open a named platform settings screen.")
    screen_p.add_argument("name", choices=sorted(screens.SCREENS))
    screen_p.add_argument("--package", type=str, default=None, help="App package.")
    screen_p.set_defaults(func=_cmd_open_screen)

    profiles_p = sub.add_parser("profiles", help="List vendor profiles.")
    profiles_p.set_defaults(func=_cmd_profiles)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
