"""
awsinv/exceptions.py - 통합 예외 계층 구조

예외 계층 구조:
    InventoryError (베이스)
    ├── ConfigurationError (자격 증명/프로파일/엔드포인트 설정 오류 - 치명적)
    ├── CollectionError (수집기 실행 불가 - 치명적)
    ├── PersistenceError (배치 트랜잭션 실패 - 롤백 후 치명적)
    └── ClusterError (EKS 클러스터 연결)
        ├── ClusterNotFoundError (소프트 스킵)
        └── ClusterConnectError (경고 후 스킵)

리전/버킷/클러스터 단위의 일시적 실패는 예외로 전파되지 않고
``awsinv.parallel``의 TaskError/ErrorCollector로 수집됩니다.

Usage:
    from awsinv.exceptions import PersistenceError, is_not_found

    try:
        store.persist(records)
    except PersistenceError as e:
        print(format_error_for_user(e))
"""

from __future__ import annotations

from typing import Any

# =============================================================================
# 베이스 예외
# =============================================================================


class InventoryError(Exception):
    """인벤토리 기본 예외 클래스

    Attributes:
        message: 에러 메시지
        cause: 원인 예외 (체이닝용)
        details: 추가 상세 정보
    """

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.details = details or {}

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """예외 정보를 딕셔너리로 반환"""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "cause": str(self.cause) if self.cause else None,
            "details": self.details,
        }


class ConfigurationError(InventoryError):
    """자격 증명, 프로파일, 리전 설정 관련 예외"""

    def __init__(self, key: str, message: str, cause: Exception | None = None):
        super().__init__(f"설정 오류 [{key}]: {message}", cause)
        self.config_key = key
        self.details["config_key"] = key


class CollectionError(InventoryError):
    """수집기 전체를 중단시키는 예외 (인증 실패 등)"""

    def __init__(
        self,
        service: str,
        message: str,
        region: str | None = None,
        cause: Exception | None = None,
    ):
        location = f"{service}/{region}" if region else service
        super().__init__(f"수집 실패 [{location}]: {message}", cause)
        self.service = service
        self.region = region
        self.details["service"] = service
        if region:
            self.details["region"] = region


class PersistenceError(InventoryError):
    """저장소 쓰기 실패 예외 (배치 전체 롤백됨)"""

    def __init__(
        self,
        message: str,
        identifier: str | None = None,
        batch_size: int = 0,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause)
        self.identifier = identifier
        self.batch_size = batch_size
        self.details["batch_size"] = batch_size
        if identifier:
            self.details["identifier"] = identifier


class ClusterError(InventoryError):
    """EKS 클러스터 연결 관련 예외"""

    def __init__(self, cluster: str, region: str, message: str, cause: Exception | None = None):
        super().__init__(f"클러스터 '{cluster}' ({region}): {message}", cause)
        self.cluster = cluster
        self.region = region
        self.details.update({"cluster": cluster, "region": region})


class ClusterNotFoundError(ClusterError):
    """클러스터가 해당 리전에 존재하지 않음"""

    def __init__(self, cluster: str, region: str, cause: Exception | None = None):
        super().__init__(cluster, region, "not found", cause)


class ClusterConnectError(ClusterError):
    """클러스터 인증/연결/엔드포인트 오류"""


# =============================================================================
# 예외 유틸리티 함수
# =============================================================================

ACCESS_DENIED_CODES = frozenset(
    {
        "AccessDenied",
        "AccessDeniedException",
        "UnauthorizedAccess",
        "UnauthorizedOperation",
    }
)

THROTTLING_CODES = frozenset(
    {
        "Throttling",
        "ThrottlingException",
        "RequestLimitExceeded",
        "TooManyRequestsException",
        "RateExceeded",
        "SlowDown",
    }
)

NOT_FOUND_CODES = frozenset(
    {
        "ResourceNotFoundException",
        "ResourceNotFoundFault",
        "NotFoundException",
        "NoSuchEntity",
        "NoSuchBucket",
        "NoSuchTagSet",
        "NoSuchHostedZone",
        "CacheClusterNotFound",
        "DBInstanceNotFound",
        "LoadBalancerNotFound",
        "InvalidInstanceID.NotFound",
    }
)

AUTH_FAILURE_CODES = frozenset(
    {
        "ExpiredToken",
        "ExpiredTokenException",
        "InvalidClientTokenId",
        "UnrecognizedClientException",
        "SignatureDoesNotMatch",
        "AuthFailure",
    }
)

# 자격 증명 자체가 없거나 프로파일이 잘못된 경우 (botocore 예외 클래스명)
AUTH_FAILURE_TYPES = frozenset(
    {
        "NoCredentialsError",
        "PartialCredentialsError",
        "ProfileNotFound",
        "NoRegionError",
        "SSOTokenLoadError",
        "UnauthorizedSSOTokenError",
        "TokenRetrievalError",
    }
)


def _error_code(error: Exception) -> str:
    response = getattr(error, "response", None)
    if isinstance(response, dict):
        return response.get("Error", {}).get("Code", "") or ""
    return ""


def is_access_denied(error: Exception) -> bool:
    """액세스 거부 오류인지 확인"""
    return _error_code(error) in ACCESS_DENIED_CODES


def is_throttling(error: Exception) -> bool:
    """스로틀링 오류인지 확인"""
    return _error_code(error) in THROTTLING_CODES


def is_not_found(error: Exception) -> bool:
    """리소스를 찾을 수 없는 오류인지 확인

    ClusterNotFoundError 및 ``NotFound``로 끝나는 EC2 계열 코드도 포함합니다.
    """
    if isinstance(error, ClusterNotFoundError):
        return True
    code = _error_code(error)
    return code in NOT_FOUND_CODES or code.endswith(".NotFound")


def is_auth_failure(error: Exception) -> bool:
    """재시도 없이 즉시 중단해야 하는 인증/설정 오류인지 확인

    자격 증명 누락, 프로파일 없음, 만료된 토큰, 잘못된 키 등이 해당됩니다.
    """
    if isinstance(error, ConfigurationError):
        return True
    if type(error).__name__ in AUTH_FAILURE_TYPES:
        return True
    return _error_code(error) in AUTH_FAILURE_CODES


def format_error_for_user(error: Exception) -> str:
    """사용자에게 표시할 에러 메시지 포맷팅

    Args:
        error: 예외

    Returns:
        사용자 친화적인 에러 메시지
    """
    if isinstance(error, InventoryError):
        return str(error)

    if type(error).__name__ in ("NoCredentialsError", "PartialCredentialsError"):
        return "AWS 자격 증명을 찾을 수 없습니다. 프로파일 또는 환경변수를 확인하세요."
    if type(error).__name__ == "ProfileNotFound":
        return f"프로파일을 찾을 수 없습니다: {error}"

    response = getattr(error, "response", None)
    if isinstance(response, dict):
        error_info = response.get("Error", {})
        code = error_info.get("Code", "UnknownError")
        message = error_info.get("Message", str(error))

        friendly_messages = {
            "AccessDenied": "권한이 없습니다. IAM 정책을 확인하세요.",
            "ExpiredToken": "인증 토큰이 만료되었습니다. 다시 로그인하세요.",
            "InvalidClientTokenId": "잘못된 자격 증명입니다.",
            "Throttling": "요청이 너무 많습니다. 잠시 후 다시 시도하세요.",
        }

        return friendly_messages.get(code, f"{code}: {message}")

    return str(error)
