"""
awsinv/parallel/errors.py - 단위 작업 에러 수집

리전 내부의 부분 실패(태그 배치, 버킷, 클러스터, 테이블 상세 조회 등)를
중단 없이 기록하고 실행 종료 후 요약 보고할 수 있게 합니다.

주요 구성 요소:
- ErrorSeverity: 에러 심각도 분류
- CollectedError: 수집된 에러 상세 정보
- ErrorCollector: 스레드 세이프 에러 수집기
- try_or_default: 실패 시 기본값 반환 헬퍼

Example:
    errors = ErrorCollector("elb")

    tags = try_or_default(
        lambda: fetch_tags(batch),
        default={},
        collector=errors,
        region=region,
        operation="describe_tags",
        severity=ErrorSeverity.WARNING,
    )

    if errors.has_errors:
        print(errors.get_summary())
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TypeVar

from .decorators import categorize_error, get_error_code
from .types import ErrorCategory

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ErrorSeverity(Enum):
    """에러 심각도 분류"""

    CRITICAL = "critical"  # 핵심 기능 실패 - 반드시 보고
    WARNING = "warning"  # 부분 실패 - 보고하되 계속 진행
    INFO = "info"  # 정보성 - 로그만 남김 (not-found 스킵 등)
    DEBUG = "debug"  # 디버그 - 개발 시에만 필요


_LOG_LEVELS = {
    ErrorSeverity.CRITICAL: logging.ERROR,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.DEBUG: logging.DEBUG,
}


@dataclass
class CollectedError:
    """수집된 에러 상세 정보

    Attributes:
        timestamp: 에러 발생 시각
        region: AWS 리전
        service: 서비스 이름 (예: "elb", "s3")
        operation: API 작업 이름 (예: "describe_tags")
        error_code: 에러 코드 또는 예외 클래스명
        error_message: 에러 메시지
        severity: 에러 심각도
        category: 에러 카테고리
        resource_id: 관련 리소스 ID (버킷명, 클러스터명 등)
    """

    timestamp: datetime
    region: str
    service: str
    operation: str
    error_code: str
    error_message: str
    severity: ErrorSeverity
    category: ErrorCategory
    resource_id: str | None = None

    def __str__(self) -> str:
        target = f" ({self.resource_id})" if self.resource_id else ""
        return (
            f"[{self.severity.value.upper()}] {self.region} - "
            f"{self.service}.{self.operation}{target}: {self.error_code}"
        )

    def to_dict(self) -> dict[str, str | None]:
        """딕셔너리로 변환 (로깅/직렬화용)"""
        return {
            "timestamp": self.timestamp.isoformat(),
            "region": self.region,
            "service": self.service,
            "operation": self.operation,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "severity": self.severity.value,
            "category": self.category.value,
            "resource_id": self.resource_id,
        }


class ErrorCollector:
    """스레드 세이프 에러 수집기

    S3 버킷 fan-out처럼 여러 스레드에서 동시에 기록될 수 있습니다.
    """

    def __init__(self, service: str):
        self.service = service
        self._errors: list[CollectedError] = []
        self._lock = threading.Lock()

    def collect(
        self,
        error: Exception,
        region: str,
        operation: str,
        severity: ErrorSeverity = ErrorSeverity.WARNING,
        resource_id: str | None = None,
    ) -> CollectedError:
        """예외를 수집하고 심각도에 맞는 레벨로 로깅

        Args:
            error: 발생한 예외 (ClientError 또는 일반 예외)
            region: AWS 리전
            operation: API 작업 이름
            severity: 에러 심각도 (기본: WARNING)
            resource_id: 관련 리소스 ID

        Returns:
            기록된 CollectedError
        """
        response = getattr(error, "response", None)
        if isinstance(response, dict):
            message = response.get("Error", {}).get("Message", str(error))
        else:
            message = str(error)

        collected = CollectedError(
            timestamp=datetime.now(),
            region=region,
            service=self.service,
            operation=operation,
            error_code=get_error_code(error),
            error_message=message,
            severity=severity,
            category=categorize_error(error),
            resource_id=resource_id,
        )

        with self._lock:
            self._errors.append(collected)

        logger.log(_LOG_LEVELS[severity], "%s - %s", collected, message)
        return collected

    @property
    def errors(self) -> list[CollectedError]:
        """수집된 모든 에러의 복사본"""
        with self._lock:
            return list(self._errors)

    @property
    def has_errors(self) -> bool:
        with self._lock:
            return len(self._errors) > 0

    @property
    def warning_errors(self) -> list[CollectedError]:
        """WARNING 이상 심각도 에러 (운영자에게 보고 대상)"""
        with self._lock:
            return [e for e in self._errors if e.severity in (ErrorSeverity.CRITICAL, ErrorSeverity.WARNING)]

    def get_summary(self) -> str:
        """심각도별 에러 건수 요약 (예: "에러 3건 (info: 1건, warning: 2건)")"""
        with self._lock:
            if not self._errors:
                return "에러 없음"

            by_severity: dict[str, int] = {}
            for e in self._errors:
                by_severity[e.severity.value] = by_severity.get(e.severity.value, 0) + 1

            parts = [f"{k}: {v}건" for k, v in sorted(by_severity.items())]
            return f"에러 {len(self._errors)}건 ({', '.join(parts)})"

    def extend(self, errors: Iterable[CollectedError]) -> None:
        """다른 수집기에서 기록된 에러 추가 (로깅 없이)"""
        with self._lock:
            self._errors.extend(errors)

    def clear(self) -> None:
        with self._lock:
            self._errors.clear()


def try_or_default(
    func: Callable[[], T],
    default: T,
    collector: ErrorCollector | None = None,
    region: str = "",
    operation: str = "",
    severity: ErrorSeverity = ErrorSeverity.WARNING,
    resource_id: str | None = None,
) -> T:
    """함수 실행, 실패 시 기본값 반환 + 에러 수집

    부수적인 API 호출(태그 조회 등)이 실패해도 리전 전체를 중단하지 않고
    기본값으로 대체합니다.

    Args:
        func: 실행할 함수 (인자 없음)
        default: 실패 시 반환할 기본값
        collector: ErrorCollector (None이면 로깅만)
        region: AWS 리전
        operation: API 작업 이름
        severity: 에러 심각도
        resource_id: 관련 리소스 ID

    Returns:
        함수 실행 결과 또는 default
    """
    try:
        return func()
    except Exception as e:
        if collector is not None:
            collector.collect(e, region, operation, severity, resource_id)
        else:
            logger.log(_LOG_LEVELS[severity], "[%s] %s: %s - %s", region, operation, get_error_code(e), e)
        return default
