"""Android controller utilities.

A thin wrapper around the `adb` binary. Every device-side operation in
autostart-router (property reads, `am start` launches) goes through
`AndroidController.adb_shell` so that tests can substitute a fake controller
that records shell commands.

Notes
-----
* We do not attempt to provide a full-featured device manager here.
* Results are returned as-is; interpreting `am start` output is the
  launcher's job (see `launcher.py`).
"""

from __future__ import annotations

import shlex
import subprocess
from dataclasses import dataclass
from typing import Optional, Tuple


class AndroidControllerError(RuntimeError):
    """Raised when an adb operation fails."""


@dataclass(frozen=True)
class AdbResult:
    args: list[str]
    stdout: str
    stderr: str
    returncode: int

    def ok(self) -> bool:
        return self.returncode == 0


def parse_component(component: str) -> Tuple[Optional[str], Optional[str]]:
    """Parse Android component string 'pkg/.Act' or 'pkg/pkg.Act'."""

    component = str(component).strip()
    if "/" not in component:
        return None, None
    pkg, activity = component.split("/", 1)
    pkg = pkg.strip()
    activity = activity.strip()
    if not pkg or not activity:
        return None, None
    if activity.startswith("."):
        activity = pkg + activity
    return pkg, activity


class AndroidController:
    """Thin wrapper around adb for property reads and activity launches."""

    def __init__(
        self,
        *,
        adb_path: str = "adb",
        serial: Optional[str] = None,
        timeout_s: float = 15.0,
    ) -> None:
        self._adb_path = adb_path
        self._serial = serial
        self._timeout_s = timeout_s

    @property
    def serial(self) -> Optional[str]:
        return self._serial

    def _base_cmd(self) -> list[str]:
        cmd = [self._adb_path]
        if self._serial:
            cmd += ["-s", self._serial]
        return cmd

    def adb(self, *args: str, timeout_s: float | None = None, check: bool = True) -> AdbResult:
        """Run an adb command and return stdout/stderr/returncode.

        A missing or unrunnable adb binary, or a timeout, is reported as
        AndroidControllerError so callers only have one failure type to handle.
        """

        cmd = self._base_cmd() + list(args)
        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self._timeout_s if timeout_s is None else float(timeout_s),
            )
        except FileNotFoundError as e:
            raise AndroidControllerError(f"adb not found: {self._adb_path}") from e
        except subprocess.TimeoutExpired as e:
            raise AndroidControllerError(f"adb command timed out: {' '.join(cmd)}") from e
        except OSError as e:
            raise AndroidControllerError(f"adb could not be run: {self._adb_path}: {e}") from e

        result = AdbResult(
            args=cmd,
            stdout=proc.stdout,
            stderr=proc.stderr,
            returncode=proc.returncode,
        )
        if check and not result.ok():
            raise AndroidControllerError(
                f"adb command failed (rc={result.returncode}): {' '.join(cmd)}\n"
                f"stdout: {result.stdout}\n"
                f"stderr: {result.stderr}"
            )
        return result

    def adb_shell(
        self,
        command: str,
        *,
        timeout_s: float | None = None,
        check: bool = True,
    ) -> AdbResult:
        return self.adb("shell", command, timeout_s=timeout_s, check=check)

    def getprop(self, name: str, *, timeout_s: float | None = None) -> str:
        res = self.adb_shell(f"getprop {shlex.quote(name)}", timeout_s=timeout_s, check=False)
        if not res.ok():
            return ""
        return res.stdout.strip()


def detect_single_device_serial(*, adb_path: str = "adb") -> str:
    """Return the only connected adb device serial.

    If there are zero or multiple devices, raises SystemExit with guidance.
    """

    try:
        proc = subprocess.run(
            [adb_path, "devices"],
            capture_output=True,
            text=True,
            timeout=5.0,
        )
    except FileNotFoundError as e:
        raise SystemExit(f"adb not found: {adb_path}") from e
    except subprocess.TimeoutExpired as e:
        raise SystemExit(f"adb devices timed out: {adb_path}") from e
    except OSError as e:
        raise SystemExit(f"adb could not be run: {adb_path}: {e}") from e

    out = (proc.stdout or "") + "\n" + (proc.stderr or "")
    devices: list[str] = []
    for raw in out.splitlines():
        line = raw.strip()
        if not line or line.startswith("*") or line.startswith("List of devices attached"):
            continue
        parts = line.split()
        if len(parts) < 2:
            continue
        serial, state = parts[0], parts[1]
        if state == "device":
            devices.append(serial)

    if len(devices) == 1:
        return devices[0]
    if not devices:
        raise SystemExit(
            "No adb devices in state=device; connect a device or pass "
            "--serial/$AUTOSTART_ROUTER_SERIAL."
        )
    raise SystemExit(
        "Multiple adb devices detected; pass --serial or set $AUTOSTART_ROUTER_SERIAL. "
        f"devices={devices}"
    )
