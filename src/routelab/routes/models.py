"""
Data models for planned routes, their markers and the user accounts.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _isoformat(value):
    return value.isoformat() if value is not None else None


class Route(Base):
    """Model for a saved driving route."""

    __tablename__ = 'routes'
    __table_args__ = {'sqlite_autoincrement': True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, default='')
    route_type = Column(String(50), default='driving')
    city = Column(String(100), default='')
    district = Column(String(100), default='')
    district_type = Column(String(20), default='区')

    # 交通特征计数
    intersections = Column(Integer, default=0)
    right_turns = Column(Integer, default=0)
    left_turns = Column(Integer, default=0)
    u_turns = Column(Integer, default=0)
    roundabouts = Column(Integer, default=0)
    special_traffic_lights = Column(Integer, default=0)
    special_intersections = Column(Integer, default=0)

    start_lng = Column(Float, nullable=False)
    start_lat = Column(Float, nullable=False)
    end_lng = Column(Float, nullable=False)
    end_lat = Column(Float, nullable=False)
    waypoints = Column(JSON)  # [{"lng": .., "lat": ..}, ...]

    # 路径规划结果
    distance = Column(Float, default=0)  # 公里
    duration = Column(Integer, default=0)  # 分钟
    polyline = Column(JSON)  # [[lng, lat], ...]
    steps = Column(JSON)
    tolls = Column(Float, default=0)
    traffic_lights = Column(Integer, default=0)

    created_by = Column(String(100), default='system')
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    # 关系
    markers = relationship(
        "RouteMarker",
        back_populates="route",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def to_dict(self) -> Dict[str, Any]:
        data = {column.name: getattr(self, column.name) for column in self.__table__.columns}
        data['waypoints'] = data['waypoints'] or []
        data['steps'] = data['steps'] or []
        data['polyline'] = data['polyline'] or []
        data['created_at'] = _isoformat(self.created_at)
        data['updated_at'] = _isoformat(self.updated_at)
        return data

    def __repr__(self):
        return f"<Route(id={self.id}, name='{self.name}', route_type='{self.route_type}')>"


class RouteMarker(Base):
    """Model for a point of interest placed along a route."""

    __tablename__ = 'route_markers'
    __table_args__ = {'sqlite_autoincrement': True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    route_id = Column(Integer, ForeignKey('routes.id', ondelete='CASCADE'), nullable=False, index=True)
    lng = Column(Float, nullable=False)
    lat = Column(Float, nullable=False)
    marker_type = Column(String(50), default='important')
    name = Column(String(200), nullable=False)
    description = Column(Text, default='')
    image_url = Column(String(500), default='')
    contact = Column(String(200), default='')
    importance = Column(Integer, default=1)
    category = Column(String(50), default='other')
    created_at = Column(DateTime, default=utcnow, nullable=False)

    route = relationship("Route", back_populates="markers")

    def to_dict(self) -> Dict[str, Any]:
        data = {column.name: getattr(self, column.name) for column in self.__table__.columns}
        data['created_at'] = _isoformat(self.created_at)
        return data

    def __repr__(self):
        return f"<RouteMarker(id={self.id}, route_id={self.route_id}, name='{self.name}')>"


class User(Base):
    """Account consumed by the external login layer."""

    __tablename__ = 'users'

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), unique=True, nullable=False)
    password_hash = Column(String(200), nullable=False)
    is_admin = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f"<User(username='{self.username}', is_admin={self.is_admin})>"
