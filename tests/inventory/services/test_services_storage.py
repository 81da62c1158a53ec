"""
tests/inventory/services/test_services_storage.py - S3 버킷 수집 테스트
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from conftest import create_mock_client_error

from awsinv.inventory.services.storage import (
    RecentObjects,
    bucket_region,
    collect_s3_buckets,
    fetch_bucket_detail,
)
from awsinv.parallel import ErrorCollector

BASE_TIME = datetime(2024, 5, 1, tzinfo=timezone.utc)


def _objects(count: int) -> list[dict]:
    return [{"Key": f"obj-{i}", "Size": 10, "LastModified": BASE_TIME + timedelta(minutes=i)} for i in range(count)]


def _s3_client(buckets: dict[str, dict]) -> MagicMock:
    """buckets: 이름 → {"region", "objects", "tags", "fail"}"""
    s3 = MagicMock()

    def get_paginator(operation):
        paginator = MagicMock()
        if operation == "list_buckets":
            paginator.paginate.side_effect = lambda **kw: iter(
                [{"Buckets": [{"Name": name, "CreationDate": BASE_TIME} for name in buckets]}]
            )
        else:

            def paginate(Bucket):
                if buckets[Bucket].get("fail"):
                    raise create_mock_client_error("AccessDenied")
                return iter([{"Contents": buckets[Bucket].get("objects", [])}])

            paginator.paginate.side_effect = paginate
        return paginator

    def get_bucket_location(Bucket):
        return {"LocationConstraint": buckets[Bucket].get("region")}

    def get_bucket_tagging(Bucket):
        tags = buckets[Bucket].get("tags")
        if isinstance(tags, Exception):
            raise tags
        if tags is None:
            raise create_mock_client_error("NoSuchTagSet")
        return {"TagSet": [{"Key": k, "Value": v} for k, v in tags.items()]}

    s3.get_paginator.side_effect = get_paginator
    s3.get_bucket_location.side_effect = get_bucket_location
    s3.get_bucket_tagging.side_effect = get_bucket_tagging
    return s3


class TestRecentObjects:
    """최신 객체 버퍼 테스트"""

    def test_keeps_newest(self):
        recent = RecentObjects(capacity=3)
        for obj in _objects(10):
            recent.offer(obj["Key"], obj["LastModified"], obj["Size"])

        assert len(recent) == 3
        assert [o["key"] for o in recent.newest_first()] == ["obj-9", "obj-8", "obj-7"]

    def test_order_independent(self):
        recent = RecentObjects(capacity=2)
        for obj in reversed(_objects(5)):
            recent.offer(obj["Key"], obj["LastModified"], obj["Size"])

        assert [o["key"] for o in recent.newest_first()] == ["obj-4", "obj-3"]

    def test_older_ignored_when_full(self):
        recent = RecentObjects(capacity=1)
        recent.offer("new", BASE_TIME + timedelta(days=1))
        recent.offer("old", BASE_TIME)

        assert recent.newest_first()[0]["key"] == "new"

    def test_serialized(self):
        recent = RecentObjects()
        recent.offer("a", BASE_TIME, 5)
        assert recent.newest_first() == [{"key": "a", "last_modified": "2024-05-01T00:00:00+00:00", "size": 5}]

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            RecentObjects(capacity=0)


class TestBucketRegion:
    @pytest.mark.parametrize(
        "constraint,expected",
        [(None, "us-east-1"), ("", "us-east-1"), ("EU", "eu-west-1"), ("ap-northeast-2", "ap-northeast-2")],
    )
    def test_legacy_values(self, constraint, expected):
        s3 = MagicMock()
        s3.get_bucket_location.return_value = {"LocationConstraint": constraint}
        assert bucket_region(s3, "b") == expected


class TestFetchBucketDetail:
    """버킷 상세 조회 테스트"""

    def test_detail(self, mock_session):
        s3 = _s3_client({"logs": {"region": "eu-west-1", "objects": _objects(7), "tags": {"env": "prod"}}})
        mock_session.client.return_value = s3

        detail = fetch_bucket_detail(mock_session, "logs")

        assert detail.region == "eu-west-1"
        assert detail.object_count == 7
        assert detail.total_size_bytes == 70
        assert len(detail.recent) == 5
        assert detail.tags == {"env": "prod"}
        regions = [c.kwargs["region_name"] for c in mock_session.client.call_args_list]
        assert regions == ["us-east-1", "eu-west-1"]

    def test_no_tag_set(self, mock_session):
        mock_session.client.return_value = _s3_client({"empty": {"region": "us-east-1"}})

        detail = fetch_bucket_detail(mock_session, "empty")

        assert detail.tags == {}
        assert detail.object_count == 0

    def test_tag_error_collected(self, mock_session):
        mock_session.client.return_value = _s3_client(
            {"b": {"region": "us-east-1", "tags": create_mock_client_error("AccessDenied")}}
        )
        errors = ErrorCollector("s3")

        detail = fetch_bucket_detail(mock_session, "b", errors)

        assert detail.tags == {}
        assert errors.errors[0].operation == "get_bucket_tagging"

    def test_tag_error_raised_without_collector(self, mock_session):
        mock_session.client.return_value = _s3_client(
            {"b": {"region": "us-east-1", "tags": create_mock_client_error("AccessDenied")}}
        )
        with pytest.raises(Exception):
            fetch_bucket_detail(mock_session, "b")


class TestCollectS3Buckets:
    """collect_s3_buckets 테스트"""

    def test_records(self, mock_session):
        mock_session.client.return_value = _s3_client(
            {
                "alpha": {"region": "ap-northeast-2", "objects": _objects(2), "tags": {"team": "a"}},
                "beta": {"region": None},
            }
        )

        records = collect_s3_buckets(mock_session, "us-east-1")

        assert [r.identifier for r in records] == ["arn:aws:s3:::alpha", "arn:aws:s3:::beta"]
        alpha = records[0]
        assert alpha.kind == "s3:bucket"
        assert alpha.location == "ap-northeast-2"
        assert alpha.network_addresses == []
        assert alpha.labels == {"team": "a"}
        assert alpha.attributes["object_count"] == 2
        assert alpha.attributes["creation_date"] == "2024-05-01T00:00:00+00:00"
        assert [o["key"] for o in alpha.attributes["recent_objects"]] == ["obj-1", "obj-0"]
        assert records[1].location == "us-east-1"

    def test_bucket_failure_isolated(self, mock_session):
        """버킷 하나의 실패는 해당 버킷만 제외하고 보고"""
        mock_session.client.return_value = _s3_client(
            {
                "ok-1": {"region": "us-east-1"},
                "denied": {"region": "us-east-1", "fail": True},
                "ok-2": {"region": "us-east-1"},
            }
        )
        errors = ErrorCollector("s3")

        records = collect_s3_buckets(mock_session, "us-east-1", errors)

        assert [r.display_name for r in records] == ["ok-1", "ok-2"]
        failed = [e for e in errors.errors if e.operation == "bucket_detail"]
        assert len(failed) == 1
        assert failed[0].resource_id == "denied"
        assert failed[0].error_code == "AccessDenied"

    def test_no_buckets(self, mock_session):
        mock_session.client.return_value = _s3_client({})
        assert collect_s3_buckets(mock_session, "us-east-1") == []
