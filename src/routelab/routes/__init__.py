"""
Route planning normalization and persistence.
"""

from .amap import AmapClient, Strategy, STRATEGY_DESCRIPTIONS
from .database import RouteDatabase, bootstrap
from .markers import MarkerStore
from .models import Route, RouteMarker, User
from .normalizer import RoutePlanner, normalize
from .search import RouteSearch, SearchResult
from .store import RouteStore
from .types import BoundingBox, Coordinate, RoutePlan, Step, WriteResult

__all__ = [
    'AmapClient', 'Strategy', 'STRATEGY_DESCRIPTIONS',
    'RouteDatabase', 'bootstrap',
    'Route', 'RouteMarker', 'User',
    'RouteStore', 'MarkerStore', 'RouteSearch', 'SearchResult',
    'RoutePlanner', 'normalize',
    'BoundingBox', 'Coordinate', 'RoutePlan', 'Step', 'WriteResult',
]
