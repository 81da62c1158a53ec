"""
tests/parallel/test_parallel_errors.py - ErrorCollector / try_or_default 테스트
"""

import logging
import threading

from conftest import create_mock_client_error

from awsinv.parallel.errors import ErrorCollector, ErrorSeverity, try_or_default
from awsinv.parallel.types import ErrorCategory


class TestErrorCollector:
    """ErrorCollector 테스트"""

    def test_collect_client_error(self):
        collector = ErrorCollector("elb")
        collected = collector.collect(
            create_mock_client_error("AccessDenied", "no access"),
            "us-east-1",
            "describe_tags",
            resource_id="arn:lb",
        )

        assert collected.error_code == "AccessDenied"
        assert collected.error_message == "no access"
        assert collected.category == ErrorCategory.ACCESS_DENIED
        assert str(collected) == "[WARNING] us-east-1 - elb.describe_tags (arn:lb): AccessDenied"
        assert collector.has_errors

    def test_collect_logs_at_severity(self, caplog):
        collector = ErrorCollector("eks")
        with caplog.at_level(logging.INFO, logger="awsinv.parallel.errors"):
            collector.collect(ValueError("gone"), "us-east-1", "connect", ErrorSeverity.INFO, "c1")

        assert caplog.records[-1].levelno == logging.INFO

    def test_warning_errors_filter(self):
        collector = ErrorCollector("eks")
        collector.collect(ValueError("a"), "r", "op", ErrorSeverity.INFO)
        collector.collect(ValueError("b"), "r", "op", ErrorSeverity.WARNING)
        collector.collect(ValueError("c"), "r", "op", ErrorSeverity.CRITICAL)

        assert len(collector.errors) == 3
        assert [e.error_message for e in collector.warning_errors] == ["b", "c"]

    def test_summary(self):
        collector = ErrorCollector("s3")
        assert collector.get_summary() == "에러 없음"

        collector.collect(ValueError("a"), "r", "op", ErrorSeverity.WARNING)
        collector.collect(ValueError("b"), "r", "op", ErrorSeverity.INFO)
        assert collector.get_summary() == "에러 2건 (info: 1건, warning: 1건)"

    def test_clear(self):
        collector = ErrorCollector("s3")
        collector.collect(ValueError("a"), "r", "op")
        collector.clear()
        assert not collector.has_errors

    def test_extend(self):
        source = ErrorCollector("s3")
        source.collect(ValueError("a"), "r", "op")
        target = ErrorCollector("s3")

        target.extend(source.errors)

        assert [e.operation for e in target.errors] == ["op"]

    def test_thread_safe(self):
        collector = ErrorCollector("s3")

        def worker():
            for _ in range(50):
                collector.collect(ValueError("x"), "r", "op", ErrorSeverity.DEBUG)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(collector.errors) == 200

    def test_to_dict(self):
        collected = ErrorCollector("rds").collect(ValueError("x"), "r", "op")
        data = collected.to_dict()
        assert data["service"] == "rds"
        assert data["severity"] == "warning"


class TestTryOrDefault:
    """try_or_default 테스트"""

    def test_success(self):
        assert try_or_default(lambda: {"a": "1"}, default={}) == {"a": "1"}

    def test_failure_returns_default_and_collects(self):
        collector = ErrorCollector("elb")

        def fail():
            raise create_mock_client_error("Throttling")

        result = try_or_default(fail, default={}, collector=collector, region="r", operation="describe_tags")

        assert result == {}
        assert collector.errors[0].operation == "describe_tags"

    def test_failure_without_collector(self):
        def fail():
            raise RuntimeError("x")

        assert try_or_default(fail, default=None) is None
