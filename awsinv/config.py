"""
awsinv/config.py - 중앙 설정 관리

애플리케이션 전역 상수와 환경변수 헬퍼를 제공합니다.
설정값은 불변(frozen) 데이터클래스로 관리됩니다.

Usage:
    from awsinv.config import settings, get_default_region, get_default_db_path

    region = get_default_region()       # "ap-northeast-2"
    batch = settings.ELB_TAG_BATCH_SIZE  # 20
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from awsinv import __version__


@dataclass(frozen=True)
class Settings:
    """애플리케이션 설정 (불변)

    Attributes:
        DEFAULT_REGION: 리전 미지정 시 기본 리전
        GLOBAL_API_REGION: 글로벌 서비스(Route53, S3 목록) 호출 리전
        GLOBAL_LOCATION: 리전이 없는 리소스의 location 값
        DEFAULT_DB_FILENAME: 기본 인벤토리 DB 파일명
        API_CONNECT_TIMEOUT: 연결 타임아웃 (초)
        API_READ_TIMEOUT: 읽기 타임아웃 (초)
        API_MAX_ATTEMPTS: botocore 클라이언트 최대 시도 횟수
        API_RETRY_COUNT: 리전 단위 실행기 재시도 횟수
        ELB_TAG_BATCH_SIZE: ELBv2 describe_tags 배치 크기 (API 제한 20)
        ROUTE53_TAG_BATCH_SIZE: Route53 list_tags_for_resources 배치 크기 (API 제한 10)
        S3_RECENT_OBJECT_COUNT: 버킷별로 보관할 최신 객체 수
        EKS_POD_PAGE_SIZE: Pod 목록 페이지 크기
        EKS_AUTH_API_VERSION: kubeconfig exec 인증 API 버전
    """

    DEFAULT_REGION: str = "ap-northeast-2"
    GLOBAL_API_REGION: str = "us-east-1"
    GLOBAL_LOCATION: str = "global"
    DEFAULT_DB_FILENAME: str = "aws_inventory.db"

    API_CONNECT_TIMEOUT: int = 10
    API_READ_TIMEOUT: int = 30
    API_MAX_ATTEMPTS: int = 5
    API_RETRY_COUNT: int = 2

    ELB_TAG_BATCH_SIZE: int = 20
    ROUTE53_TAG_BATCH_SIZE: int = 10
    S3_RECENT_OBJECT_COUNT: int = 5

    EKS_POD_PAGE_SIZE: int = 500
    EKS_AUTH_API_VERSION: str = "client.authentication.k8s.io/v1beta1"

    ALL_SERVICES: tuple[str, ...] = field(
        default=("ec2", "elb", "rds", "dynamodb", "elasticache", "eks", "route53", "s3")
    )


settings = Settings()


def get_version() -> str:
    """패키지 버전 문자열 반환"""
    return __version__


# =============================================================================
# 환경변수 헬퍼
# =============================================================================


def get_default_profile() -> str | None:
    """AWS_PROFILE → AWS_DEFAULT_PROFILE 순으로 기본 프로파일 반환"""
    return os.environ.get("AWS_PROFILE") or os.environ.get("AWS_DEFAULT_PROFILE") or None


def get_default_region() -> str:
    """AWS_REGION → AWS_DEFAULT_REGION → settings.DEFAULT_REGION 순으로 리전 반환"""
    return os.environ.get("AWS_REGION") or os.environ.get("AWS_DEFAULT_REGION") or settings.DEFAULT_REGION


def get_default_db_path() -> Path:
    """인벤토리 DB 기본 경로

    AWS_INVENTORY_DB 환경변수가 있으면 그 경로를, 없으면 현재 디렉토리의
    ``aws_inventory.db``를 사용합니다.
    """
    env_path = os.environ.get("AWS_INVENTORY_DB")
    if env_path:
        return Path(env_path).expanduser()
    return Path.cwd() / settings.DEFAULT_DB_FILENAME


# =============================================================================
# 로깅 설정
# =============================================================================


@dataclass(frozen=True)
class LogConfig:
    """로깅 설정

    Attributes:
        level: 루트 로거 레벨
        quiet_loggers: WARNING으로 제한할 외부 라이브러리 로거
    """

    level: int = logging.WARNING
    quiet_loggers: tuple[str, ...] = (
        "botocore",
        "boto3",
        "urllib3",
        "kubernetes",
    )

    @classmethod
    def from_env(cls, verbose: bool = False) -> LogConfig:
        """AWS_INVENTORY_LOG_LEVEL 환경변수 또는 verbose 플래그로 생성"""
        if verbose:
            return cls(level=logging.INFO)

        name = os.environ.get("AWS_INVENTORY_LOG_LEVEL", "").upper()
        level = logging.getLevelName(name) if name else logging.WARNING
        if not isinstance(level, int):
            level = logging.WARNING
        return cls(level=level)
