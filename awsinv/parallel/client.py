"""
awsinv/parallel/client.py - boto3 client 생성 헬퍼

Retry(adaptive 모드) + 타임아웃이 설정된 boto3 client를 생성합니다.
타임아웃은 재시도 소진 후 해당 리전의 실패로 기록됩니다.

Example:
    from awsinv.parallel.client import get_client

    ec2 = get_client(session, "ec2", region_name="ap-northeast-2")
    route53 = get_client(session, "route53", region_name=settings.GLOBAL_API_REGION)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal, cast

from awsinv.config import settings

if TYPE_CHECKING:
    import boto3

RetryMode = Literal["legacy", "standard", "adaptive"]

DEFAULT_RETRY_MODE: RetryMode = "adaptive"
DEFAULT_MAX_POOL_CONNECTIONS = 25  # S3 버킷 fan-out 동시 호출 수 고려


def get_client(
    session: boto3.Session,
    service_name: str,
    region_name: str | None = None,
    max_attempts: int = settings.API_MAX_ATTEMPTS,
    retry_mode: RetryMode = DEFAULT_RETRY_MODE,
    connect_timeout: int = settings.API_CONNECT_TIMEOUT,
    read_timeout: int = settings.API_READ_TIMEOUT,
    max_pool_connections: int = DEFAULT_MAX_POOL_CONNECTIONS,
    **kwargs: Any,
) -> Any:
    """Retry가 적용된 boto3 client 생성

    Args:
        session: boto3 Session
        service_name: AWS 서비스 이름 (ec2, elbv2, s3 등)
        region_name: 리전 (None이면 세션 기본값)
        max_attempts: 최대 시도 횟수
        retry_mode: 재시도 모드 ('adaptive' 또는 'standard')
        connect_timeout: 연결 타임아웃 (초)
        read_timeout: 읽기 타임아웃 (초)
        max_pool_connections: HTTP 연결 풀 크기
        **kwargs: session.client()에 전달할 추가 인자

    Returns:
        boto3 client
    """
    from botocore.config import Config

    config = Config(
        retries={"max_attempts": max_attempts, "mode": retry_mode},  # pyright: ignore[reportArgumentType]
        connect_timeout=connect_timeout,
        read_timeout=read_timeout,
        max_pool_connections=max_pool_connections,
    )

    if "config" in kwargs:
        existing = kwargs.pop("config")
        config = config.merge(existing)

    return session.client(  # pyright: ignore[reportCallIssue]
        cast(Any, service_name),
        region_name=region_name,
        config=config,
        **kwargs,
    )
