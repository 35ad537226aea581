from .catalog import CatalogEndpoints
from .private import PrivateEndpoints
from .stats import StatsEndpoints
from .user import UserEndpoints

__all__ = ["CatalogEndpoints", "PrivateEndpoints", "StatsEndpoints", "UserEndpoints"]
