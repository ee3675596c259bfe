from __future__ import annotations

import shlex

import pytest
from fakes import FakeController

from autostart_router.routing import profiles
from autostart_router.routing.router import VendorPermissionRouter
from autostart_router.routing.targets import TargetAction
from autostart_router.runtime.android.controller import AdbResult
from autostart_router.runtime.android.launcher import (
    ActivityLauncher,
    TargetUnavailable,
    build_am_start_command,
    launch_failure_reason,
)

PKG = "com.example.newapplocker"


def _res(stdout: str, *, returncode: int = 0, stderr: str = "") -> AdbResult:
    return AdbResult(
        args=["adb", "shell", "am"], stdout=stdout, stderr=stderr, returncode=returncode
    )


def test_build_command_for_component() -> None:
    t = TargetAction.component_of("com.iqoo.secure/.ui.phoneoptimize.AddWhiteListActivity")
    assert build_am_start_command(t) == [
        "am",
        "start",
        "-n",
        "com.iqoo.secure/com.iqoo.secure.ui.phoneoptimize.AddWhiteListActivity",
        "-f",
        "0x10000000",
    ]


def test_build_command_for_action_with_data_and_extras() -> None:
    t = TargetAction(
        package="com.miui.securitycenter",
        activity="com.miui.permcenter.permissions.PermissionsEditorActivity",
        action="miui.intent.action.APP_PERM_EDITOR",
        extras=(("extra_pkgname", PKG),),
    )
    assert build_am_start_command(t) == [
        "am",
        "start",
        "-a",
        "miui.intent.action.APP_PERM_EDITOR",
        "-n",
        "com.miui.securitycenter/com.miui.permcenter.permissions.PermissionsEditorActivity",
        "--es",
        "extra_pkgname",
        PKG,
        "-f",
        "0x10000000",
    ]


def test_build_command_for_package_scoped_action() -> None:
    t = TargetAction(action="android.intent.action.VIEW", data="https://x", package="com.a.b")
    cmd = build_am_start_command(t)
    assert cmd[:6] == ["am", "start", "-a", "android.intent.action.VIEW", "-d", "https://x"]
    assert cmd[6:8] == ["-p", "com.a.b"]


def test_failure_reason_detection() -> None:
    assert launch_failure_reason(_res("Starting: Intent { cmp=a/b }\n")) is None
    brought_to_front = _res(
        "Starting: Intent { cmp=a/b }\n"
        "Warning: Activity not started, its current task has been brought to the front\n"
    )
    assert launch_failure_reason(brought_to_front) is None

    missing = _res(
        "Starting: Intent { cmp=a/b }\nError type 3\n"
        "Error: Activity class {a/b} does not exist.\n"
    )
    assert launch_failure_reason(missing) == "Error: Activity class {a/b} does not exist."

    security = _res(
        "Starting: Intent { cmp=a/b }\n",
        stderr="java.lang.SecurityException: Permission Denial: starting Intent\n",
    )
    reason = launch_failure_reason(security)
    assert reason is not None and "SecurityException" in reason

    assert launch_failure_reason(_res("", returncode=255)) == "am start exited with rc=255"


def test_launch_raises_target_unavailable_for_missing_component() -> None:
    ctr = FakeController()
    launcher = ActivityLauncher(controller=ctr)
    t = TargetAction.component_of("com.oppo.safe/.permission.startup.StartupAppListActivity")
    with pytest.raises(TargetUnavailable) as exc:
        launcher.launch(t)
    assert exc.value.target == t
    assert len(ctr.shell_cmds) == 1


def test_launch_returns_result_for_installed_component() -> None:
    cmp = "com.huawei.systemmanager/com.huawei.systemmanager.optimize.process.ProtectActivity"
    ctr = FakeController(installed_components={cmp})
    res = ActivityLauncher(controller=ctr).launch(TargetAction.component_of(cmp))
    assert res.ok()
    assert shlex.split(ctr.shell_cmds[0])[:4] == ["am", "start", "-n", cmp]


def test_router_over_adb_launcher_oppo_second_candidate() -> None:
    oppo = profiles.candidates_for("oppo", PKG)
    ctr = FakeController(installed_components={oppo[1].component})
    router = VendorPermissionRouter(launcher=ActivityLauncher(controller=ctr), package_name=PKG)
    assert router.route("OPPO") is True
    assert [shlex.split(c)[3] for c in ctr.shell_cmds] == [oppo[0].component, oppo[1].component]


def test_router_over_adb_launcher_unknown_brand_generic_request() -> None:
    ctr = FakeController(
        resolvable_actions={profiles.ACTION_REQUEST_IGNORE_BATTERY_OPTIMIZATIONS}
    )
    router = VendorPermissionRouter(launcher=ActivityLauncher(controller=ctr), package_name=PKG)
    assert router.route("unknownbrand") is True
    assert [shlex.split(c) for c in ctr.shell_cmds] == [
        [
            "am",
            "start",
            "-a",
            profiles.ACTION_REQUEST_IGNORE_BATTERY_OPTIMIZATIONS,
            "-d",
            f"package:{PKG}",
            "-f",
            "0x10000000",
        ]
    ]
