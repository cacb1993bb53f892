"""
Value types shared by the geometry decoder, the normalizer and the stores.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class Coordinate:
    lng: float
    lat: float

    def as_pair(self) -> list[float]:
        return [self.lng, self.lat]

    def as_param(self) -> str:
        """Amap 接口使用的 ``lng,lat`` 形式。"""
        return f"{self.lng},{self.lat}"

    @classmethod
    def from_value(cls, value: Any) -> "Coordinate":
        """Accept ``{"lng", "lat"}`` mappings, ``(lng, lat)`` pairs or Coordinates."""
        if isinstance(value, Coordinate):
            return value
        if isinstance(value, dict):
            return cls(float(value["lng"]), float(value["lat"]))
        lng, lat = value
        return cls(float(lng), float(lat))


@dataclass(frozen=True)
class BoundingBox:
    southwest: Coordinate
    northeast: Coordinate

    def to_dict(self) -> dict:
        return {
            "southwest": asdict(self.southwest),
            "northeast": asdict(self.northeast),
        }


@dataclass
class Step:
    instruction: str
    distance: float  # 公里
    duration: int  # 分钟（向上取整）
    road: str = ""
    orientation: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class RoutePlan:
    """Canonical driving plan derived from one provider path."""

    distance: float  # 公里，保留一位小数
    duration: int  # 分钟
    tolls: float = 0
    traffic_lights: int = 0
    steps: list[Step] = field(default_factory=list)
    polyline: list[Coordinate] = field(default_factory=list)
    bounds: Optional[BoundingBox] = None
    waypoint_count: int = 0

    def to_record(self) -> dict:
        """Fields accepted by ``RouteStore.create`` and ``RouteStore.update``."""
        return {
            "distance": self.distance,
            "duration": self.duration,
            "tolls": self.tolls,
            "traffic_lights": self.traffic_lights,
            "steps": [step.to_dict() for step in self.steps],
            "polyline": [point.as_pair() for point in self.polyline],
        }

    @property
    def geometry(self):
        """路线 LineString；少于两个坐标点时为 None。"""
        from .geometry import to_linestring  # geometry imports this module

        return to_linestring(self.polyline)

    def to_dict(self) -> dict:
        data = self.to_record()
        data["bounds"] = self.bounds.to_dict() if self.bounds else None
        data["waypoint_count"] = self.waypoint_count
        geometry = self.geometry
        data["wkt"] = geometry.wkt if geometry is not None else None
        return data


@dataclass(frozen=True)
class WriteResult:
    """Outcome of an update or delete; ``rows_affected == 0`` means no row matched."""

    id: int
    rows_affected: int
