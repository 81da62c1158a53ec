"""
tests/inventory/test_inventory_types.py - ResourceRecord 테스트
"""

import pytest

from awsinv.inventory.types import (
    GLOBAL_LOCATION,
    KIND_EC2_INSTANCE,
    KIND_S3_BUCKET,
    SERVICE_ALIASES,
    ResourceRecord,
    resolve_kind,
)


class TestResourceRecord:
    """ResourceRecord 정규화 테스트"""

    def test_defaults(self):
        record = ResourceRecord(identifier="arn:aws:s3:::logs")
        assert record.display_name == "arn:aws:s3:::logs"
        assert record.location == GLOBAL_LOCATION
        assert record.network_addresses == []

    def test_empty_identifier(self):
        with pytest.raises(ValueError):
            ResourceRecord(identifier="  ")

    def test_addresses_normalized_and_deduplicated(self):
        record = ResourceRecord(
            identifier="i-1",
            network_addresses=["10.0.0.1", "2001:DB8::1", "10.0.0.1", "2001:db8:0::1"],
        )
        assert record.network_addresses == ["10.0.0.1", "2001:db8::1"]

    def test_invalid_address(self):
        with pytest.raises(ValueError):
            ResourceRecord(identifier="i-1", network_addresses=["999.1.1.1"])

    def test_labels_stringified(self):
        record = ResourceRecord(identifier="i-1", labels={"count": 3, "empty": None})
        assert record.labels == {"count": "3", "empty": ""}

    def test_to_dict(self):
        record = ResourceRecord(identifier="i-1", display_name="web", kind=KIND_EC2_INSTANCE, location="us-east-1")
        data = record.to_dict()
        assert data["display_name"] == "web"
        assert data["kind"] == "ec2:instance"


class TestResolveKind:
    def test_aliases(self):
        assert resolve_kind("s3") == KIND_S3_BUCKET
        assert resolve_kind(" EC2 ") == KIND_EC2_INSTANCE
        assert len(SERVICE_ALIASES) == 8

    def test_unknown_passthrough(self):
        assert resolve_kind("lambda:function") == "lambda:function"
