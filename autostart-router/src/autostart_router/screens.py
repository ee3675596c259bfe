"""Named platform settings screens an app locker sends the user to."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Mapping

from autostart_router.routing.profiles import (
    ACTION_IGNORE_BATTERY_OPTIMIZATION_SETTINGS,
    PACKAGE_PLACEHOLDER,
    bind_package,
)
from autostart_router.routing.targets import TargetAction
from autostart_router.runtime.android.launcher import TargetUnavailable

logger = logging.getLogger(__name__)

SCREENS: Mapping[str, TargetAction] = MappingProxyType(
    {
        "usage_access": TargetAction(action="android.settings.USAGE_ACCESS_SETTINGS"),
        "overlay": TargetAction(
            action="android.settings.action.MANAGE_OVERLAY_PERMISSION",
            data=f"package:{PACKAGE_PLACEHOLDER}",
        ),
        "battery_optimization": TargetAction(action=ACTION_IGNORE_BATTERY_OPTIMIZATION_SETTINGS),
        "app_details": TargetAction(
            action="android.settings.APPLICATION_DETAILS_SETTINGS",
            data=f"package:{PACKAGE_PLACEHOLDER}",
        ),
        "home": TargetAction(
            action="android.intent.action.MAIN",
            category="android.intent.category.HOME",
        ),
    }
)


def screen_target(name: str, package_name: str) -> TargetAction:
    return bind_package(SCREENS[name], package_name)


def open_screen(launcher: Any, name: str, package_name: str) -> bool:
    """Open a named screen; returns False when the device refuses it.

    Unknown names raise KeyError.
    """

    target = screen_target(name, package_name)
    try:
        launcher.launch(target)
    except TargetUnavailable as e:
        logger.warning("could not open %s: %s", name, e.reason)
        return False
    return True
