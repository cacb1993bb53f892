"""
高德 polyline 解码与边界计算

polyline 形如 ``"116.1,39.1;116.2,39.2"``。解码是尽力而为的：无法解析为两个有限
浮点数的坐标点会被跳过，其余点保留；边界基于同一组有效点计算。
"""

import logging
import math
from typing import List, Optional, Sequence

from shapely.geometry import LineString, MultiPoint

from .types import BoundingBox, Coordinate

logger = logging.getLogger(__name__)


def _parse_point(raw: str) -> Optional[Coordinate]:
    parts = raw.split(',')
    if len(parts) != 2:
        return None
    try:
        lng, lat = float(parts[0]), float(parts[1])
    except ValueError:
        return None
    if not (math.isfinite(lng) and math.isfinite(lat)):
        return None
    return Coordinate(lng, lat)


def decode(polyline) -> List[Coordinate]:
    """
    解析polyline字符串为坐标列表

    Args:
        polyline: 高德地图的polyline字符串

    Returns:
        坐标列表；输入为空或非字符串时返回空列表
    """
    if not polyline or not isinstance(polyline, str):
        logger.debug("Polyline数据为空，无法解码")
        return []

    points = []
    skipped = 0
    for raw in polyline.split(';'):
        raw = raw.strip()
        if not raw:
            continue
        point = _parse_point(raw)
        if point is None:
            skipped += 1
            continue
        points.append(point)

    if skipped:
        logger.warning(f"Polyline解码跳过 {skipped} 个无效坐标点，保留 {len(points)} 个")
    return points


def compute_bounds(polyline) -> Optional[BoundingBox]:
    """根据polyline计算路线的边界（西南角和东北角），无有效点时返回 None。"""
    points = decode(polyline)
    if not points:
        return None

    min_lng, min_lat, max_lng, max_lat = MultiPoint([p.as_pair() for p in points]).bounds
    return BoundingBox(
        southwest=Coordinate(min_lng, min_lat),
        northeast=Coordinate(max_lng, max_lat),
    )


def to_linestring(points: Sequence[Coordinate]) -> Optional[LineString]:
    """
    从坐标列表创建LineString几何对象

    少于两个点无法构成线，返回 None。
    """
    if len(points) < 2:
        return None
    return LineString([p.as_pair() for p in points])
