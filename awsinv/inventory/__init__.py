"""
awsinv/inventory - 리소스 수집

ResourceRecord 정규화 모델, IP 분류, 서비스별 수집기, 수집→저장 실행 루프.
"""

from .collector import COLLECTOR_REGISTRY, EksPodCollector, ResourceCollector, build_collectors, resolve_services
from .ip import IPClass, classify, is_public
from .runner import InventoryReport, run_inventory
from .types import GLOBAL_LOCATION, SERVICE_ALIASES, ResourceRecord, resolve_kind

__all__ = [
    # Types
    "ResourceRecord",
    "SERVICE_ALIASES",
    "GLOBAL_LOCATION",
    "resolve_kind",
    # IP
    "IPClass",
    "classify",
    "is_public",
    # Collectors
    "COLLECTOR_REGISTRY",
    "ResourceCollector",
    "EksPodCollector",
    "build_collectors",
    "resolve_services",
    # Runner
    "InventoryReport",
    "run_inventory",
]
