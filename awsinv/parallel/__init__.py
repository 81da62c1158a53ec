"""
awsinv/parallel - 리전 실행, fan-out, 에러 수집

Example:
    from awsinv.parallel import RegionExecutor, fan_out, ErrorCollector

    result = RegionExecutor(auth.session).execute(collect_ec2, regions, service="ec2")
    records = result.get_flat_data()
"""

from .client import get_client
from .decorators import RetryConfig, categorize_error, get_error_code, is_retryable
from .errors import CollectedError, ErrorCollector, ErrorSeverity, try_or_default
from .executor import ParallelConfig, RegionExecutor, fan_out
from .types import ErrorCategory, ParallelExecutionResult, TaskError, TaskResult

__all__ = [
    # Client
    "get_client",
    # Executor
    "ParallelConfig",
    "RegionExecutor",
    "fan_out",
    # Types
    "ErrorCategory",
    "ParallelExecutionResult",
    "TaskError",
    "TaskResult",
    # Retry
    "RetryConfig",
    "categorize_error",
    "get_error_code",
    "is_retryable",
    # Error collection
    "CollectedError",
    "ErrorCollector",
    "ErrorSeverity",
    "try_or_default",
]
