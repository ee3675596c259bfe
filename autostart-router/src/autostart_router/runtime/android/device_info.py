from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

PROP_MANUFACTURER = "ro.product.manufacturer"
PROP_BRAND = "ro.product.brand"
PROP_MODEL = "ro.product.model"
PROP_PRODUCT = "ro.product.name"
PROP_RELEASE = "ro.build.version.release"
PROP_SDK = "ro.build.version.sdk"


def _safe_int(v: Any) -> Optional[int]:
    try:
        if v is None or v == "":
            return None
        return int(v)
    except Exception:
        return None


@dataclass(frozen=True)
class DeviceInfo:
    manufacturer: str
    brand: str
    model: str
    product: str
    release: str
    sdk_int: Optional[int]

    def summary(self) -> str:
        sdk = self.sdk_int if self.sdk_int is not None else "unknown"
        return (
            f"Manufacturer: {self.manufacturer}, Model: {self.model}, "
            f"Brand: {self.brand}, SDK: {sdk}"
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def read_device_info(controller: Any) -> DeviceInfo:
    """Read build properties through `controller.getprop` (missing -> "")."""

    return DeviceInfo(
        manufacturer=controller.getprop(PROP_MANUFACTURER),
        brand=controller.getprop(PROP_BRAND),
        model=controller.getprop(PROP_MODEL),
        product=controller.getprop(PROP_PRODUCT),
        release=controller.getprop(PROP_RELEASE),
        sdk_int=_safe_int(controller.getprop(PROP_SDK)),
    )
