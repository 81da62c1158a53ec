"""
awsinv/inventory/collector.py - 서비스 수집기

``ResourceCollector``는 서비스 하나의 ``collect_*`` 함수를 ``RegionExecutor``로
여러 리전에 실행합니다. 리전 실패는 결과의 TaskError로, 리전 내부의 단위 실패는
``errors``(ErrorCollector)로 모입니다.

서비스 목록은 고정되어 있습니다 (ec2, elb, rds, dynamodb, elasticache, eks, route53, s3).
글로벌 서비스(route53, s3)는 리전 목록과 무관하게 us-east-1에서 한 번만 실행됩니다.

Example:
    >>> collectors = build_collectors(["ec2", "eks"], eks_clusters=["prod"])
    >>> result = collectors[0].collect(auth, ["ap-northeast-2"])
    >>> records = result.get_flat_data()
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from typing import TYPE_CHECKING

from awsinv.config import settings
from awsinv.parallel import ErrorCollector, ParallelConfig, ParallelExecutionResult, RegionExecutor

from .services import (
    collect_dynamodb_tables,
    collect_ec2_instances,
    collect_eks_pods,
    collect_elasticache_clusters,
    collect_load_balancers,
    collect_rds_instances,
    collect_route53_hosted_zones,
    collect_s3_buckets,
)
from .types import SERVICE_ALIASES, ResourceRecord

if TYPE_CHECKING:
    import boto3

    from awsinv.auth import AuthContext

    from .services import ClusterConnector

logger = logging.getLogger(__name__)

ALL_SERVICES_KEYWORD = "all"

CollectFunc = Callable[["boto3.Session", str, ErrorCollector], list[ResourceRecord]]


class ResourceCollector:
    """서비스 하나의 리전별 수집기

    Attributes:
        service: 서비스 이름 (예: "ec2")
        kind: 생성하는 ResourceRecord의 kind
        is_global: True면 GLOBAL_API_REGION에서 한 번만 실행
        errors: 마지막 collect() 실행의 단위 에러 수집기
    """

    def __init__(
        self,
        service: str,
        collect_func: CollectFunc,
        is_global: bool = False,
        config: ParallelConfig | None = None,
    ):
        self.service = service
        self.kind = SERVICE_ALIASES[service]
        self.is_global = is_global
        self.config = config
        self._collect_func = collect_func
        self.errors = ErrorCollector(service)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(service={self.service!r})"

    def target_regions(self, regions: Sequence[str]) -> list[str]:
        if self.is_global:
            return [settings.GLOBAL_API_REGION]
        return list(regions)

    def collect_region(self, session: boto3.Session, region: str, errors: ErrorCollector) -> list[ResourceRecord]:
        return self._collect_func(session, region, errors)

    def collect(self, auth: AuthContext, regions: Sequence[str]) -> ParallelExecutionResult[list[ResourceRecord]]:
        """모든 대상 리전에서 수집

        Args:
            auth: 인증 컨텍스트
            regions: 대상 리전 (글로벌 서비스는 무시)

        Returns:
            리전별 결과 (get_flat_data()로 ResourceRecord 목록)

        Raises:
            CollectionError: 인증/설정 실패
        """
        self.errors = ErrorCollector(self.service)
        executor = RegionExecutor(auth.session, self.config)
        # 리전별 마지막 시도의 단위 에러만 보고
        attempts: dict[str, ErrorCollector] = {}

        def _collect(session, region: str) -> list[ResourceRecord]:
            attempts[region] = ErrorCollector(self.service)
            return self.collect_region(session, region, attempts[region])

        result = executor.execute(_collect, self.target_regions(regions), service=self.service)
        for attempt_errors in attempts.values():
            self.errors.extend(attempt_errors.errors)
        return result


class EksPodCollector(ResourceCollector):
    """EKS Pod 수집기

    clusters가 비어 있으면 리전마다 클러스터를 조회하고, 지정되어 있으면
    해당 이름만 모든 리전에서 찾습니다 (없는 리전은 not-found로 스킵).
    """

    def __init__(
        self,
        clusters: Iterable[str] = (),
        connector: ClusterConnector | None = None,
        config: ParallelConfig | None = None,
    ):
        super().__init__("eks", collect_eks_pods, config=config)
        self.clusters = tuple(c for c in clusters if c)
        self.connector = connector
        self._profile: str | None = None

    def collect(self, auth: AuthContext, regions: Sequence[str]) -> ParallelExecutionResult[list[ResourceRecord]]:
        self._profile = auth.profile_name
        return super().collect(auth, regions)

    def collect_region(self, session: boto3.Session, region: str, errors: ErrorCollector) -> list[ResourceRecord]:
        return collect_eks_pods(
            session,
            region,
            errors,
            clusters=self.clusters,
            connector=self.connector,
            profile=self._profile,
        )


# 서비스 이름 → (collect 함수, 글로벌 여부)
COLLECTOR_REGISTRY: dict[str, tuple[CollectFunc, bool]] = {
    "ec2": (collect_ec2_instances, False),
    "elb": (collect_load_balancers, False),
    "rds": (collect_rds_instances, False),
    "dynamodb": (collect_dynamodb_tables, False),
    "elasticache": (collect_elasticache_clusters, False),
    "route53": (collect_route53_hosted_zones, True),
    "s3": (collect_s3_buckets, True),
}


def resolve_services(services: Iterable[str], skip_eks: bool = False) -> list[str]:
    """서비스 이름 정규화

    ``all``은 전체 서비스로 확장되고, 모르는 이름은 경고 후 제외됩니다.
    skip_eks는 마지막에 적용되어 eks를 제거합니다.
    """
    resolved: list[str] = []
    for raw in services:
        name = raw.strip().lower()
        if not name:
            continue
        if name == ALL_SERVICES_KEYWORD:
            candidates: Iterable[str] = settings.ALL_SERVICES
        elif name in settings.ALL_SERVICES:
            candidates = (name,)
        else:
            logger.warning("알 수 없는 서비스 '%s' 스킵", raw)
            continue
        for candidate in candidates:
            if candidate not in resolved:
                resolved.append(candidate)

    if skip_eks:
        resolved = [s for s in resolved if s != "eks"]
    return resolved


def build_collectors(
    services: Iterable[str],
    eks_clusters: Iterable[str] = (),
    skip_eks: bool = False,
    connector: ClusterConnector | None = None,
    config: ParallelConfig | None = None,
) -> list[ResourceCollector]:
    """서비스 이름 목록으로 수집기 생성 (입력 순서 유지)

    Args:
        services: 서비스 이름 (``all`` 허용)
        eks_clusters: EKS 대상 클러스터 (비어 있으면 자동 탐색)
        skip_eks: True면 eks 제외
        connector: EKS 클러스터 연결자 (테스트 주입용)
        config: 실행 설정

    Returns:
        ResourceCollector 목록
    """
    collectors: list[ResourceCollector] = []
    for service in resolve_services(services, skip_eks=skip_eks):
        if service == "eks":
            collectors.append(EksPodCollector(eks_clusters, connector=connector, config=config))
            continue
        collect_func, is_global = COLLECTOR_REGISTRY[service]
        collectors.append(ResourceCollector(service, collect_func, is_global=is_global, config=config))
    return collectors
