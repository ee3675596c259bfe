from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional, Tuple

from autostart_router.runtime.android.controller import parse_component

STAGE_VENDOR = "vendor"
STAGE_FALLBACK_PRIMARY = "fallback_primary"
STAGE_FALLBACK_SECONDARY = "fallback_secondary"


class DispatchResult(enum.Enum):
    SUCCESS = "success"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class TargetAction:
    """Descriptor of an external screen to open.

    Either a component (`package` + `activity`) or a named system action
    (`action`, optionally with a `data` URI). Component targets may also
    carry an action and string extras.
    """

    package: Optional[str] = None
    activity: Optional[str] = None
    action: Optional[str] = None
    data: Optional[str] = None
    category: Optional[str] = None
    extras: Tuple[Tuple[str, str], ...] = field(default=())

    def __post_init__(self) -> None:
        if not self.activity and not self.action:
            raise ValueError("TargetAction needs an activity or an action")
        if self.activity and not self.package:
            raise ValueError("TargetAction with an activity needs a package")

    @classmethod
    def component_of(
        cls,
        component: str,
        *,
        action: Optional[str] = None,
        extras: Tuple[Tuple[str, str], ...] = (),
    ) -> "TargetAction":
        pkg, activity = parse_component(component)
        if pkg is None or activity is None:
            raise ValueError(f"invalid component: {component!r}")
        return cls(package=pkg, activity=activity, action=action, extras=tuple(extras))

    @property
    def component(self) -> Optional[str]:
        if self.package and self.activity:
            return f"{self.package}/{self.activity}"
        return None

    def describe(self) -> str:
        if self.component:
            return self.component
        if self.data:
            return f"{self.action} ({self.data})"
        return str(self.action)


@dataclass(frozen=True)
class LaunchAttempt:
    target: TargetAction
    result: DispatchResult
    stage: str
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.result is DispatchResult.SUCCESS

    def to_dict(self) -> dict:
        return {
            "stage": self.stage,
            "target": self.target.describe(),
            "result": self.result.value,
            "reason": self.reason,
        }


@dataclass
class RouteReport:
    manufacturer: str
    profile: Optional[str]
    attempts: list[LaunchAttempt] = field(default_factory=list)

    @property
    def launched(self) -> bool:
        return any(a.ok for a in self.attempts)

    @property
    def succeeded_with(self) -> Optional[TargetAction]:
        for attempt in self.attempts:
            if attempt.ok:
                return attempt.target
        return None

    def to_dict(self) -> dict:
        winner = self.succeeded_with
        return {
            "manufacturer": self.manufacturer,
            "profile": self.profile,
            "launched": self.launched,
            "succeeded_with": winner.describe() if winner is not None else None,
            "attempts": [a.to_dict() for a in self.attempts],
        }
