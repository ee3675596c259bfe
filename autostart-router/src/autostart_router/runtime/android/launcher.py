from __future__ import annotations

import logging
import re
import shlex
from typing import Any

from autostart_router.routing.targets import TargetAction
from autostart_router.runtime.android.controller import AdbResult, AndroidControllerError

logger = logging.getLogger(__name__)

# Intent.FLAG_ACTIVITY_NEW_TASK
FLAG_ACTIVITY_NEW_TASK = 0x10000000

# `am start` exits 0 on most builds even when the activity is missing, so the
# output has to be inspected.
_FAILURE_PATTERNS = (
    re.compile(r"^[ \t]*Error:", re.MULTILINE),
    re.compile(r"^[ \t]*Error type \d+", re.MULTILINE),
    re.compile(r"^[ \t]*Security exception", re.MULTILINE | re.IGNORECASE),
    re.compile(r"SecurityException"),
    re.compile(r"does not exist", re.IGNORECASE),
    re.compile(r"unable to resolve Intent", re.IGNORECASE),
)


class TargetUnavailable(RuntimeError):
    """The target screen could not be launched (missing or refused)."""

    def __init__(self, target: TargetAction, reason: str) -> None:
        super().__init__(f"{target.describe()}: {reason}")
        self.target = target
        self.reason = reason


def _adb_shell_cmd(parts: list[str]) -> str:
    return " ".join(shlex.quote(p) for p in parts)


def build_am_start_command(target: TargetAction) -> list[str]:
    parts = ["am", "start"]
    if target.action:
        parts += ["-a", target.action]
    if target.data:
        parts += ["-d", target.data]
    if target.category:
        parts += ["-c", target.category]
    if target.component:
        parts += ["-n", target.component]
    elif target.package:
        parts += ["-p", target.package]
    for key, value in target.extras:
        parts += ["--es", key, value]
    parts += ["-f", hex(FLAG_ACTIVITY_NEW_TASK)]
    return parts


def launch_failure_reason(res: AdbResult) -> str | None:
    """Return why an `am start` invocation failed, or None if it launched."""

    combined = "\n".join(s for s in (res.stdout, res.stderr) if s)
    for pat in _FAILURE_PATTERNS:
        m = pat.search(combined)
        if m:
            line_start = combined.rfind("\n", 0, m.start()) + 1
            line_end = combined.find("\n", m.end())
            line = combined[line_start : line_end if line_end != -1 else None]
            return line.strip()[:200]
    if not res.ok():
        return f"am start exited with rc={res.returncode}"
    return None


class ActivityLauncher:
    """Launches TargetActions on the device via `am start`."""

    def __init__(self, *, controller: Any, timeout_s: float | None = None) -> None:
        self._controller = controller
        self._timeout_s = timeout_s

    def launch(self, target: TargetAction) -> AdbResult:
        cmd = _adb_shell_cmd(build_am_start_command(target))
        logger.debug("launching %s: %s", target.describe(), cmd)
        try:
            res = self._controller.adb_shell(cmd, timeout_s=self._timeout_s, check=False)
        except AndroidControllerError as e:
            raise TargetUnavailable(target, str(e)) from e

        reason = launch_failure_reason(res)
        if reason is not None:
            raise TargetUnavailable(target, reason)
        return res
