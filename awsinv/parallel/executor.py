"""
awsinv/parallel/executor.py - 리전 실행기 및 fan-out

리전 단위 수집 작업을 순차 실행하고(Map), 결과를 ParallelExecutionResult로
모읍니다(Reduce). 한 리전의 실패는 TaskError로 기록되고 다른 리전 수집은
계속됩니다. 인증/설정 실패만 CollectionError로 즉시 중단합니다.

주요 구성 요소:
- ParallelConfig: 실행 설정 (fan-out 워커 상한, 재시도)
- RegionExecutor: 리전 순차 실행기 (재시도 포함)
- fan_out: 항목별 동시 실행 (S3 버킷 상세 조회 등)

Example:
    def collect_volumes(session, region):
        ec2 = get_client(session, "ec2", region_name=region)
        return ec2.describe_volumes()["Volumes"]

    executor = RegionExecutor(auth.session)
    result = executor.execute(collect_volumes, ["ap-northeast-2", "us-east-1"], service="ec2")
    all_volumes = result.get_flat_data()
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

from awsinv.exceptions import CollectionError, is_auth_failure

from .decorators import RetryConfig, categorize_error, get_error_code, is_retryable
from .types import ParallelExecutionResult, TaskError, TaskResult

if TYPE_CHECKING:
    import boto3

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def _clear_exception_chain(e: BaseException) -> None:
    """traceback + chained exception 메모리 누수 방지"""
    e.__traceback__ = None
    if e.__context__ is not None:
        e.__context__.__traceback__ = None
    if e.__cause__ is not None:
        e.__cause__.__traceback__ = None


@dataclass
class ParallelConfig:
    """실행 설정

    Attributes:
        max_workers: fan-out 최대 동시 스레드 수 (1~100)
        retry_config: 재시도 설정 (None이면 기본값)
    """

    max_workers: int = 20
    retry_config: RetryConfig | None = None

    def __post_init__(self) -> None:
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.max_workers > 100:
            self.max_workers = 100


def _failure(identifier: str, region: str, error: Exception, retries: int, start_time: float) -> TaskResult:
    _clear_exception_chain(error)
    return TaskResult(
        identifier=identifier,
        region=region,
        success=False,
        error=TaskError(
            identifier=identifier,
            region=region,
            category=categorize_error(error),
            error_code=get_error_code(error),
            message=str(error),
            retries=retries,
            original_exception=error,
        ),
        duration_ms=(time.monotonic() - start_time) * 1000,
    )


class RegionExecutor:
    """리전 순차 실행기

    리전 목록을 순서대로 실행하여 결과 순서가 입력 순서와 같습니다.

    Example:
        executor = RegionExecutor(auth.session, ParallelConfig(retry_config=RetryConfig(max_retries=0)))
        result = executor.execute(collect_ec2, regions, service="ec2")

        print(f"성공: {result.success_count}, 실패: {result.error_count}")
    """

    def __init__(
        self,
        session_factory: Callable[[str], boto3.Session],
        config: ParallelConfig | None = None,
    ):
        """초기화

        Args:
            session_factory: 리전을 받아 boto3 Session을 반환하는 함수
            config: 실행 설정 (None이면 기본값)
        """
        self.session_factory = session_factory
        self.config = config or ParallelConfig()
        self._retry_config = self.config.retry_config or RetryConfig()

    def execute(
        self,
        func: Callable[[boto3.Session, str], T],
        regions: Sequence[str],
        service: str = "default",
    ) -> ParallelExecutionResult[T]:
        """작업 함수를 리전마다 실행

        Args:
            func: (session, region) -> T 함수
            regions: 대상 리전 목록
            service: 서비스 이름 (결과 식별자, 로깅용)

        Returns:
            ParallelExecutionResult[T]

        Raises:
            CollectionError: 인증/설정 실패 (재시도 없이 즉시)
        """
        if not regions:
            logger.warning("[%s] 실행할 리전이 없습니다", service)
            return ParallelExecutionResult()

        logger.info("[%s] 수집 시작: %d개 리전", service, len(regions))
        start_time = time.monotonic()

        results: list[TaskResult[T]] = []
        for region in regions:
            result = self._execute_single(func, region, service)
            if not result.success and result.error is not None:
                logger.warning("[%s] 리전 수집 실패: %s", service, result.error)
            results.append(result)

        exec_result = ParallelExecutionResult(results=tuple(results))
        logger.info(
            "[%s] 수집 완료: 성공 %d, 실패 %d, 총 %.0fms",
            service,
            exec_result.success_count,
            exec_result.error_count,
            (time.monotonic() - start_time) * 1000,
        )
        return exec_result

    def _execute_single(
        self,
        func: Callable[[boto3.Session, str], T],
        region: str,
        service: str,
    ) -> TaskResult[T]:
        """단일 리전 실행 (세션 획득 + 지수 백오프 재시도)"""
        start_time = time.monotonic()

        for attempt in range(self._retry_config.max_retries + 1):
            try:
                session = self.session_factory(region)
                data = func(session, region)
                return TaskResult(
                    identifier=service,
                    region=region,
                    success=True,
                    data=data,
                    duration_ms=(time.monotonic() - start_time) * 1000,
                )

            except CollectionError:
                raise
            except Exception as e:
                if is_auth_failure(e):
                    raise CollectionError(service, get_error_code(e), region=region, cause=e) from e

                if not is_retryable(e) or attempt >= self._retry_config.max_retries:
                    return _failure(service, region, e, attempt, start_time)

                delay = self._retry_config.get_delay(attempt)
                logger.debug("[%s/%s] 시도 %d 실패, %.2f초 후 재시도...", service, region, attempt + 1, delay)
                time.sleep(delay)

        # range가 비어있지 않으므로 도달하지 않음
        raise AssertionError("unreachable")


def fan_out(
    items: Iterable[T],
    func: Callable[[T], R],
    key: Callable[[T], str] = str,
    region: str = "",
    max_workers: int | None = None,
) -> ParallelExecutionResult[R]:
    """항목별 작업을 동시 실행

    스레드 풀 크기는 항목 수(최대 max_workers)로 정해지며 결과 순서는
    입력 순서를 유지합니다. 한 항목의 실패는 해당 TaskResult에만 기록됩니다.

    Args:
        items: 작업 대상 항목
        func: item -> R 함수
        key: 결과 식별자 추출 함수
        region: 결과에 기록할 리전
        max_workers: 최대 스레드 수 (None이면 ParallelConfig 기본값)

    Returns:
        ParallelExecutionResult[R]
    """
    item_list = list(items)
    if not item_list:
        return ParallelExecutionResult()

    limit = max_workers or ParallelConfig().max_workers
    workers = max(1, min(len(item_list), limit))

    def run(item: T) -> TaskResult[R]:
        start_time = time.monotonic()
        identifier = key(item)
        try:
            data = func(item)
        except Exception as e:
            return _failure(identifier, region, e, 0, start_time)
        return TaskResult(
            identifier=identifier,
            region=region,
            success=True,
            data=data,
            duration_ms=(time.monotonic() - start_time) * 1000,
        )

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [executor.submit(run, item) for item in item_list]
        results = tuple(f.result() for f in futures)

    return ParallelExecutionResult(results=results)
