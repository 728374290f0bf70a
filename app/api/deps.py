"""API Dependencies"""

from app.core.cache import RouteCache, get_route_cache
from app.database import get_db

__all__ = ["get_db", "get_route_cache", "RouteCache"]
