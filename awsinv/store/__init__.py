"""
awsinv/store - SQLite 인벤토리 저장/조회/내보내기
"""

from .db import InventoryStore
from .export import export_hosts
from .query import ResourceSummary, identify_ip, list_resources

__all__ = [
    "InventoryStore",
    "ResourceSummary",
    "list_resources",
    "identify_ip",
    "export_hosts",
]
