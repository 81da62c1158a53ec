"""
awsinv/inventory/runner.py - 인벤토리 실행 루프

수집기를 순서대로 실행하고, 수집기 하나의 결과를 하나의 배치로 저장한 뒤
다음 수집기로 넘어갑니다. 리전 실패와 단위 경고는 보고서에 모아 반환합니다.
CollectionError(인증/설정)와 PersistenceError(저장)는 그대로 전파됩니다.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from awsinv.parallel import CollectedError, TaskError

if TYPE_CHECKING:
    from awsinv.auth import AuthContext
    from awsinv.store import InventoryStore

    from .collector import ResourceCollector

logger = logging.getLogger(__name__)


@dataclass
class InventoryReport:
    """인벤토리 실행 결과

    Attributes:
        total_persisted: 커밋된 레코드 수
        per_service: 서비스별 저장 건수
        failed_units: 실패한 리전 작업
        warnings: 리전 내부 단위 경고 (태그 배치, 버킷, 클러스터 등)
    """

    total_persisted: int = 0
    per_service: dict[str, int] = field(default_factory=dict)
    failed_units: list[TaskError] = field(default_factory=list)
    warnings: list[CollectedError] = field(default_factory=list)

    @property
    def has_problems(self) -> bool:
        return bool(self.failed_units or self.warnings)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_persisted": self.total_persisted,
            "per_service": dict(self.per_service),
            "failed_units": [e.to_dict() for e in self.failed_units],
            "warnings": [w.to_dict() for w in self.warnings],
        }


ProgressCallback = Callable[[str, str], None]


def run_inventory(
    store: InventoryStore,
    auth: AuthContext,
    collectors: Sequence[ResourceCollector],
    regions: Sequence[str],
    on_progress: ProgressCallback | None = None,
) -> InventoryReport:
    """수집 → 저장 루프

    Args:
        store: 인벤토리 저장소
        auth: 인증 컨텍스트
        collectors: 실행할 수집기 (순서대로)
        regions: 대상 리전
        on_progress: (service, message) 진행 알림 콜백 (CLI 출력용)

    Returns:
        InventoryReport

    Raises:
        CollectionError: 인증/설정 실패
        PersistenceError: 배치 저장 실패 (해당 배치 롤백)
    """
    report = InventoryReport()

    def notify(service: str, message: str) -> None:
        logger.info("[%s] %s", service, message)
        if on_progress is not None:
            on_progress(service, message)

    for collector in collectors:
        notify(collector.service, "수집 시작")
        result = collector.collect(auth, regions)

        report.failed_units.extend(result.get_errors())
        report.warnings.extend(collector.errors.warning_errors)

        records = result.get_flat_data()
        saved = store.persist(records) if records else 0
        report.per_service[collector.service] = report.per_service.get(collector.service, 0) + saved
        report.total_persisted += saved

        message = f"{saved}건 저장"
        if result.has_any_failure():
            message += f", 리전 실패 {result.error_count}건"
        notify(collector.service, message)

    logger.info("인벤토리 완료: 총 %d건 저장", report.total_persisted)
    return report
