"""
awsinv/parallel/decorators.py - API 에러 분류 및 재시도 유틸리티

주요 구성 요소:
- RetryConfig: 재시도 설정 (지수 백오프 + 지터)
- categorize_error: 예외를 ErrorCategory로 분류
- get_error_code: 예외에서 에러 코드 추출
- is_retryable: 재시도 가능 여부 판단

botocore 클라이언트는 자체적으로 adaptive 재시도를 수행하므로,
여기서의 재시도는 그 위에서 리전 단위 작업 전체를 다시 시도하는 용도입니다.
"""

from __future__ import annotations

import random
from dataclasses import dataclass

from awsinv.config import settings
from awsinv.exceptions import is_access_denied, is_auth_failure, is_not_found, is_throttling

from .types import ErrorCategory


@dataclass
class RetryConfig:
    """재시도 설정

    Attributes:
        max_retries: 최대 재시도 횟수 (0이면 재시도 안함)
        base_delay: 기본 대기 시간 (초)
        max_delay: 최대 대기 시간 (초)
        exponential_base: 지수 백오프 밑수
        jitter: 지터 사용 여부
    """

    max_retries: int = settings.API_RETRY_COUNT
    base_delay: float = 1.0
    max_delay: float = 30.0
    exponential_base: float = 2.0
    jitter: bool = True

    def get_delay(self, attempt: int) -> float:
        """재시도 대기 시간 계산 (attempt는 0부터 시작)"""
        delay = min(self.base_delay * (self.exponential_base**attempt), self.max_delay)
        if self.jitter:
            # Full jitter: [0, delay]
            delay = random.uniform(0, delay)
        return delay


# 재시도 가능한 AWS 에러 코드
RETRYABLE_ERROR_CODES: frozenset[str] = frozenset(
    {
        "Throttling",
        "ThrottlingException",
        "RequestLimitExceeded",
        "TooManyRequestsException",
        "RateExceeded",
        "ServiceUnavailable",
        "ServiceUnavailableException",
        "InternalError",
        "InternalServiceError",
        "RequestTimeout",
        "RequestTimeoutException",
        "ProvisionedThroughputExceededException",
        "SlowDown",
    }
)

# botocore 네트워크 계열 예외 (클래스명 기준, botocore import 없이 판별)
_NETWORK_ERROR_TYPES = frozenset(
    {
        "EndpointConnectionError",
        "ConnectionClosedError",
        "ProxyConnectionError",
        "SSLError",
    }
)
_TIMEOUT_ERROR_TYPES = frozenset({"ReadTimeoutError", "ConnectTimeoutError"})


def categorize_error(error: Exception) -> ErrorCategory:
    """예외 객체를 ErrorCategory로 분류

    Args:
        error: 분류할 예외

    Returns:
        에러 카테고리
    """
    if is_throttling(error):
        return ErrorCategory.THROTTLING
    if is_access_denied(error):
        return ErrorCategory.ACCESS_DENIED
    if is_not_found(error):
        return ErrorCategory.NOT_FOUND
    if is_auth_failure(error):
        return ErrorCategory.EXPIRED_TOKEN

    error_type = type(error).__name__
    if error_type in _TIMEOUT_ERROR_TYPES:
        return ErrorCategory.TIMEOUT
    if error_type in _NETWORK_ERROR_TYPES:
        return ErrorCategory.NETWORK

    code = get_error_code(error)
    if "Timeout" in code:
        return ErrorCategory.TIMEOUT
    if any(x in code for x in ("Invalid", "Validation", "Malformed")):
        return ErrorCategory.INVALID_REQUEST
    if any(x in code for x in ("Internal", "ServiceUnavailable")):
        return ErrorCategory.SERVICE_ERROR

    if isinstance(error, TimeoutError):
        return ErrorCategory.TIMEOUT
    if isinstance(error, (ConnectionError, OSError)):
        return ErrorCategory.NETWORK

    return ErrorCategory.UNKNOWN


def get_error_code(error: Exception) -> str:
    """ClientError면 response의 Code, 그 외에는 예외 클래스명"""
    response = getattr(error, "response", None)
    if isinstance(response, dict):
        code: str = response.get("Error", {}).get("Code", "Unknown")
        return code
    return error.__class__.__name__


def is_retryable(error: Exception) -> bool:
    """재시도 가능한 에러인지 확인

    인증 실패는 어떤 경우에도 재시도하지 않습니다.
    """
    if is_auth_failure(error):
        return False

    response = getattr(error, "response", None)
    if isinstance(response, dict):
        return response.get("Error", {}).get("Code", "") in RETRYABLE_ERROR_CODES

    error_type = type(error).__name__
    if error_type in _TIMEOUT_ERROR_TYPES or error_type in _NETWORK_ERROR_TYPES:
        return True
    return isinstance(error, (ConnectionError, TimeoutError))
