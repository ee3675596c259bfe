"""Tiered dispatch of vendor auto-start / battery-exemption screens.

The router walks a manufacturer's candidate screens in order and stops at
the first one that launches. When the manufacturer is unknown, or none of
its screens exist on the device, it asks for the platform battery
optimization exemption, and finally opens the platform battery optimization
list.

A successful launch only means the screen opened. Whether the user actually
granted anything is not observable from here.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from autostart_router.routing import profiles
from autostart_router.routing.targets import (
    STAGE_FALLBACK_PRIMARY,
    STAGE_FALLBACK_SECONDARY,
    STAGE_VENDOR,
    DispatchResult,
    LaunchAttempt,
    RouteReport,
    TargetAction,
)
from autostart_router.runtime.android.controller import AndroidControllerError
from autostart_router.runtime.android.launcher import TargetUnavailable

logger = logging.getLogger(__name__)


class VendorPermissionRouter:
    def __init__(self, *, launcher: Any, package_name: str) -> None:
        if not isinstance(package_name, str) or not package_name.strip():
            raise ValueError("package_name must be a non-empty string")
        self._launcher = launcher
        self._package_name = package_name.strip()

    @property
    def package_name(self) -> str:
        return self._package_name

    def plan(self, manufacturer: Optional[str]) -> list[tuple[str, TargetAction]]:
        """Every candidate `dispatch` could try, in order, without launching."""

        vendor = profiles.candidates_for(manufacturer, self._package_name)
        steps = [(STAGE_VENDOR, t) for t in vendor]
        primary, secondary = profiles.generic_fallbacks(self._package_name)
        steps.append((STAGE_FALLBACK_PRIMARY, primary))
        steps.append((STAGE_FALLBACK_SECONDARY, secondary))
        return steps

    def route(self, manufacturer: Optional[str]) -> bool:
        return self.dispatch(manufacturer).launched

    def dispatch(self, manufacturer: Optional[str]) -> RouteReport:
        report = RouteReport(
            manufacturer=profiles.normalize_manufacturer(manufacturer),
            profile=profiles.profile_key(manufacturer),
        )

        vendor = profiles.candidates_for(manufacturer, self._package_name)
        if not vendor:
            logger.info("no vendor profile for %r; using generic request", report.manufacturer)
        if self._try_in_order(report, STAGE_VENDOR, vendor):
            return report

        primary, secondary = profiles.generic_fallbacks(self._package_name)
        if self._try_in_order(report, STAGE_FALLBACK_PRIMARY, (primary,)):
            return report
        if self._try_in_order(report, STAGE_FALLBACK_SECONDARY, (secondary,)):
            return report

        logger.warning(
            "no settings screen could be opened for %r (%d attempts)",
            report.manufacturer,
            len(report.attempts),
        )
        return report

    def _try_in_order(
        self, report: RouteReport, stage: str, targets: Iterable[TargetAction]
    ) -> bool:
        for target in targets:
            attempt = self._attempt(target, stage)
            report.attempts.append(attempt)
            if attempt.ok:
                logger.info("opened %s (%s)", target.describe(), stage)
                return True
            logger.debug("unavailable: %s (%s): %s", target.describe(), stage, attempt.reason)
        return False

    def _attempt(self, target: TargetAction, stage: str) -> LaunchAttempt:
        try:
            self._launcher.launch(target)
        except TargetUnavailable as e:
            return LaunchAttempt(target, DispatchResult.UNAVAILABLE, stage, e.reason)
        except AndroidControllerError as e:
            return LaunchAttempt(target, DispatchResult.UNAVAILABLE, stage, str(e))
        return LaunchAttempt(target, DispatchResult.SUCCESS, stage)
