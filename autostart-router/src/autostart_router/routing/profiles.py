"""Vendor auto-start settings screens, per manufacturer.

The table is built once at import time and is read-only afterwards. Order
inside each sequence matters: the first entry is the screen found on the
most recent OS builds, later entries cover older or regional builds.
"""

from __future__ import annotations

import dataclasses
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from autostart_router.routing.targets import TargetAction

# Replaced by the caller's package name when a sequence is materialized.
PACKAGE_PLACEHOLDER = "{package}"

ACTION_REQUEST_IGNORE_BATTERY_OPTIMIZATIONS = (
    "android.settings.REQUEST_IGNORE_BATTERY_OPTIMIZATIONS"
)
ACTION_IGNORE_BATTERY_OPTIMIZATION_SETTINGS = (
    "android.settings.IGNORE_BATTERY_OPTIMIZATION_SETTINGS"
)
ACTION_MIUI_APP_PERM_EDITOR = "miui.intent.action.APP_PERM_EDITOR"

_c = TargetAction.component_of

_VIVO = (
    _c("com.vivo.permissionmanager/.activity.BgStartUpManagerActivity"),
    _c("com.iqoo.secure/.ui.phoneoptimize.AddWhiteListActivity"),
    _c("com.vivo.permissionmanager/.activity.PurviewTabActivity"),
)

_OPPO = (
    _c("com.coloros.safecenter/.permission.startup.FakeActivity"),
    _c("com.coloros.safecenter/.startupapp.StartupAppListActivity"),
    _c("com.oppo.safe/.permission.startup.StartupAppListActivity"),
)

_XIAOMI = (
    _c("com.miui.securitycenter/com.miui.permcenter.autostart.AutoStartManagementActivity"),
    _c(
        "com.miui.securitycenter/com.miui.permcenter.permissions.PermissionsEditorActivity",
        action=ACTION_MIUI_APP_PERM_EDITOR,
        extras=(("extra_pkgname", PACKAGE_PLACEHOLDER),),
    ),
)

_SAMSUNG = (
    _c("com.samsung.android.lool/com.samsung.android.sm.ui.battery.BatteryActivity"),
    _c("com.samsung.android.sm_cn/com.samsung.android.sm.ui.ram.RamActivity"),
)

_TRANSSION = (
    _c("com.transsion.phonemanager/.module.appmanager.bootstart.view.BootStartActivity"),
    _c("com.itel.autobootmanager/.AutoBootActivity"),
)

_HUAWEI = (
    _c("com.huawei.systemmanager/.startupmgr.ui.StartupNormalAppListActivity"),
    _c("com.huawei.systemmanager/.optimize.process.ProtectActivity"),
)

_ONEPLUS = (_c("com.oneplus.security/.chainlaunch.view.ChainLaunchAppListActivity"),)

_LENOVO = (_c("com.lenovo.security/.purebackground.PureBackgroundActivity"),)

PROFILES: Mapping[str, Tuple[TargetAction, ...]] = MappingProxyType(
    {
        "vivo": _VIVO,
        "oppo": _OPPO,
        "xiaomi": _XIAOMI,
        "samsung": _SAMSUNG,
        "infinix": _TRANSSION,
        "huawei": _HUAWEI,
        "oneplus": _ONEPLUS,
        "lenovo": _LENOVO,
    }
)

ALIASES: Mapping[str, str] = MappingProxyType(
    {
        "realme": "oppo",
        "redmi": "xiaomi",
        "tecno": "infinix",
        "honor": "huawei",
    }
)


def normalize_manufacturer(manufacturer: Optional[str]) -> str:
    return str(manufacturer or "").strip().lower()


def profile_key(manufacturer: Optional[str]) -> Optional[str]:
    """Canonical profile name for a manufacturer, or None when unmapped."""

    name = normalize_manufacturer(manufacturer)
    name = ALIASES.get(name, name)
    return name if name in PROFILES else None


def bind_package(target: TargetAction, package_name: str) -> TargetAction:
    extras = tuple(
        (k, package_name if v == PACKAGE_PLACEHOLDER else v) for k, v in target.extras
    )
    data = target.data.replace(PACKAGE_PLACEHOLDER, package_name) if target.data else None
    if extras == target.extras and data == target.data:
        return target
    return dataclasses.replace(target, extras=extras, data=data)


def candidates_for(manufacturer: Optional[str], package_name: str) -> Tuple[TargetAction, ...]:
    """Ordered vendor screens for a manufacturer; empty when unmapped."""

    key = profile_key(manufacturer)
    if key is None:
        return ()
    return tuple(bind_package(t, package_name) for t in PROFILES[key])


def generic_fallbacks(package_name: str) -> Tuple[TargetAction, TargetAction]:
    """(primary, secondary) platform battery-optimization screens."""

    primary = TargetAction(
        action=ACTION_REQUEST_IGNORE_BATTERY_OPTIMIZATIONS,
        data=f"package:{package_name}",
    )
    secondary = TargetAction(action=ACTION_IGNORE_BATTERY_OPTIMIZATION_SETTINGS)
    return primary, secondary
