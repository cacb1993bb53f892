"""
高德路径规划结果解析：把服务商原始响应转换为统一的 RoutePlan
"""

import logging
import math
import re
from typing import Any, Dict, List, Sequence

from ..common.exceptions import NoPathFoundError, ProviderError, ValidationError
from .amap import AmapClient, Strategy
from .geometry import compute_bounds, decode
from .types import Coordinate, RoutePlan, Step

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r'<[^>]*>')


def _text(value: Any) -> str:
    # 高德对缺失的字符串字段返回 []
    return value if isinstance(value, str) else ''


def _number(value: Any, default: float = 0.0) -> float:
    if value is None or value == '' or value == []:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def strip_tags(text: str) -> str:
    return _TAG_RE.sub('', text)


def meters_to_km(meters: Any) -> float:
    return round(_number(meters) / 1000, 1)


def seconds_to_minutes(seconds: Any) -> int:
    """向上取整：61 秒计为 2 分钟。"""
    return math.ceil(_number(seconds) / 60)


def aggregate_polyline(path: Dict[str, Any]) -> str:
    """
    获取路径的 polyline

    优先使用路径级 polyline；缺失时拼接各步骤的 polyline 片段。
    """
    polyline = _text(path.get('polyline'))
    if polyline:
        return polyline
    fragments = [_text(step.get('polyline')) for step in path.get('steps') or []]
    return ';'.join(f for f in fragments if f)


def _first_path(raw: Dict[str, Any]) -> Dict[str, Any]:
    route = raw.get('route')
    paths = route.get('paths') if isinstance(route, dict) else None
    if not isinstance(paths, list) or not paths:
        logger.error("高德API返回成功，但未找到可规划的路径")
        raise NoPathFoundError()
    return paths[0]


def _parse_step(step: Dict[str, Any]) -> Step:
    return Step(
        instruction=strip_tags(_text(step.get('instruction'))),
        distance=meters_to_km(step.get('distance')),
        duration=seconds_to_minutes(step.get('duration')),
        road=_text(step.get('road')),
        orientation=_text(step.get('orientation')),
    )


def normalize(raw: Dict[str, Any], requested_waypoint_count: int = 0) -> RoutePlan:
    """
    解析高德API返回的路径规划数据

    Args:
        raw: 高德API响应的JSON数据
        requested_waypoint_count: 请求中的途经点数量

    Returns:
        RoutePlan

    Raises:
        ProviderError: 服务商返回非成功状态
        NoPathFoundError: 响应中没有任何路径
    """
    status = raw.get('status')
    if status is not None and str(status) != '1':
        raise ProviderError(raw.get('infocode'), _text(raw.get('info')) or '未知错误')

    path = _first_path(raw)
    polyline = aggregate_polyline(path)

    plan = RoutePlan(
        distance=meters_to_km(path.get('distance')),
        duration=seconds_to_minutes(path.get('duration')),
        tolls=_number(path.get('tolls')),
        traffic_lights=int(_number(path.get('traffic_lights'))),
        steps=[_parse_step(step) for step in path.get('steps') or []],
        polyline=decode(polyline),
        bounds=compute_bounds(polyline),
        waypoint_count=requested_waypoint_count,
    )
    logger.info(f"路径解析完成: distance={plan.distance}km, duration={plan.duration}min, steps={len(plan.steps)}")
    return plan


class RoutePlanner:
    """路径规划入口：拆分起终点与途经点，调用服务商并解析结果。"""

    def __init__(self, client: AmapClient):
        self.client = client

    def plan(self, points: Sequence[Any], strategy: Any = Strategy.FASTEST, route_type: str = 'driving') -> RoutePlan:
        if not points or len(points) < 2:
            raise ValidationError('至少需要起点和终点2个路径点', details={'points': len(points or [])})
        if route_type != 'driving':
            raise ValidationError(f'不支持的路线类型: {route_type}', details={'route_type': route_type})
        try:
            strategy = Strategy(int(strategy))
        except (TypeError, ValueError):
            raise ValidationError(f'无效的路径规划策略: {strategy}', details={'strategy': strategy})

        try:
            coords: List[Coordinate] = [Coordinate.from_value(p) for p in points]
        except (KeyError, TypeError, ValueError):
            raise ValidationError('路径点格式错误，需要 lng/lat 坐标', details={'points': list(points)})
        origin, destination = coords[0], coords[-1]
        waypoints = coords[1:-1]
        logger.info(f"路径规划请求: origin={origin}, destination={destination}, waypoints={len(waypoints)}, strategy={strategy.name}")

        raw = self.client.compute_route(origin, destination, waypoints, strategy)
        return normalize(raw, len(waypoints))
