"""
Client for the Amap (高德地图) driving-direction web service.
"""

import logging
from enum import IntEnum
from typing import Any, Dict, Optional, Sequence

import requests

from ..common.exceptions import ProviderError
from .types import Coordinate

logger = logging.getLogger(__name__)


class Strategy(IntEnum):
    """Amap 驾车路径规划策略"""

    FASTEST = 0
    SHORTEST = 1
    AVOID_HIGHWAY = 2
    NO_HIGHWAY = 3
    MULTI_STRATEGY = 4
    MULTI_NO_HIGHWAY = 5
    AVOID_TOLLS = 6
    NO_HIGHWAY_AVOID_TOLLS = 7
    NO_HIGHWAY_AVOID_CONGESTION = 8
    AVOID_CONGESTION_AND_TOLLS = 9
    NO_HIGHWAY_AVOID_CONGESTION_AND_TOLLS = 10


STRATEGY_DESCRIPTIONS = {
    Strategy.FASTEST: "最快路线",
    Strategy.SHORTEST: "最短路程",
    Strategy.AVOID_HIGHWAY: "避开高速",
    Strategy.NO_HIGHWAY: "不走高速",
    Strategy.MULTI_STRATEGY: "多策略（计算时间最短、距离最短、避开高速）",
    Strategy.MULTI_NO_HIGHWAY: "多策略（不考虑高速路）",
    Strategy.AVOID_TOLLS: "避开收费",
    Strategy.NO_HIGHWAY_AVOID_TOLLS: "不走高速且避开收费",
    Strategy.NO_HIGHWAY_AVOID_CONGESTION: "不走高速且躲避拥堵",
    Strategy.AVOID_CONGESTION_AND_TOLLS: "躲避拥堵和收费",
    Strategy.NO_HIGHWAY_AVOID_CONGESTION_AND_TOLLS: "不走高速且躲避拥堵和收费",
}


class AmapClient:
    """高德地图驾车路径规划客户端"""

    SOURCE_NAME = 'amap'

    def __init__(self, api_key: Optional[str], base_url: str = "https://restapi.amap.com/v3", timeout: float = 10.0):
        """
        初始化客户端

        Args:
            api_key: 高德地图Web服务API密钥
            base_url: 接口根地址
            timeout: 请求超时（秒）
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    def compute_route(
        self,
        origin: Coordinate,
        destination: Coordinate,
        waypoints: Sequence[Coordinate] = (),
        strategy: Strategy = Strategy.FASTEST,
    ) -> Dict[str, Any]:
        """
        调用驾车路径规划接口，返回原始响应

        Raises:
            ProviderError: 未配置密钥、网络错误、HTTP 错误或响应无法解析
        """
        if not self.api_key:
            raise ProviderError(None, "未配置 AMAP_API_KEY")

        params = {
            'key': self.api_key,
            'origin': origin.as_param(),
            'destination': destination.as_param(),
            'strategy': str(int(strategy)),
            'extensions': 'all',
            'output': 'JSON',
        }
        if waypoints:
            params['waypoints'] = ';'.join(wp.as_param() for wp in waypoints)

        logger.info(
            f"调用高德API进行路径规划: origin={params['origin']}, "
            f"destination={params['destination']}, waypoints={len(waypoints)}, strategy={params['strategy']}"
        )

        try:
            response = requests.get(f"{self.base_url}/direction/driving", params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            logger.error(f"高德API调用失败: {e}")
            raise ProviderError(None, str(e)) from e
        except ValueError as e:
            logger.error(f"高德API响应无法解析: {e}")
            raise ProviderError(None, f"响应无法解析: {e}") from e

        if not isinstance(data, dict):
            raise ProviderError(None, "响应格式错误")
        return data
