"""
tests/store/test_store_query.py - list_resources / identify_ip 테스트
"""

import pytest
from conftest import make_record

from awsinv.store import identify_ip, list_resources


@pytest.fixture
def populated(store):
    store.persist(
        [
            make_record("i-1", "web", location="ap-northeast-2", addresses=["10.0.0.1", "52.1.1.1"], labels={"env": "prod"}),
            make_record("i-2", "batch", location="us-east-1", addresses=["10.0.0.2"]),
        ]
    )
    store.persist(
        [
            make_record("db-1", "orders", kind="rds:db_instance", location="ap-northeast-2", attributes={"engine": "mysql"}),
            make_record("arn:aws:s3:::logs", "logs", kind="s3:bucket", location="us-east-1"),
        ]
    )
    return store


class TestListResources:
    """필터 조회 테스트"""

    def test_all_in_insert_order(self, populated):
        assert [r.identifier for r in list_resources(populated)] == ["i-1", "i-2", "db-1", "arn:aws:s3:::logs"]

    def test_service_filter(self, populated):
        assert [r.identifier for r in list_resources(populated, services=["ec2"])] == ["i-1", "i-2"]

    def test_multiple_services_or(self, populated):
        result = list_resources(populated, services=["rds", "s3"])
        assert {r.kind for r in result} == {"rds:db_instance", "s3:bucket"}

    def test_region_and_service_and(self, populated):
        result = list_resources(populated, services=["ec2", "s3"], regions=["us-east-1"])
        assert [r.identifier for r in result] == ["i-2", "arn:aws:s3:::logs"]

    def test_no_match(self, populated):
        assert list_resources(populated, regions=["eu-central-1"]) == []

    def test_details_loaded(self, populated):
        web = list_resources(populated, services=["ec2"], regions=["ap-northeast-2"])[0]
        assert web.addresses == ["10.0.0.1", "52.1.1.1"]
        assert web.labels == {"env": "prod"}

        db = list_resources(populated, services=["rds"])[0]
        assert db.attributes == {"engine": "mysql"}
        assert db.labels == {}
        assert db.addresses == []

    def test_to_dict(self, populated):
        data = list_resources(populated, services=["s3"])[0].to_dict()
        assert data["identifier"] == "arn:aws:s3:::logs"
        assert data["location"] == "us-east-1"


class TestIdentifyIp:
    """IP 조회 테스트"""

    def test_found(self, populated):
        result = identify_ip(populated, "52.1.1.1")
        assert result is not None
        assert result.identifier == "i-1"

    def test_not_found(self, populated):
        assert identify_ip(populated, "8.8.8.8") is None

    def test_lowest_id_wins(self, store):
        """같은 IP를 가진 리소스 중 가장 먼저 저장된 리소스 반환"""
        store.persist([make_record("first", addresses=["10.9.9.9"])])
        store.persist([make_record("second", addresses=["10.9.9.9"])])
        store.persist([make_record("first", "renamed", addresses=["10.9.9.9"])])

        assert identify_ip(store, "10.9.9.9").identifier == "first"

    def test_ipv6_normalized(self, store):
        store.persist([make_record("i-6", addresses=["2600:1f18:0:0::1"])])
        assert identify_ip(store, "2600:1F18::0001").identifier == "i-6"

    def test_invalid_ip(self, store):
        with pytest.raises(ValueError):
            identify_ip(store, "nope")

    def test_describe(self, populated):
        line = identify_ip(populated, "10.0.0.2").describe("10.0.0.2")
        assert line == "IP: 10.0.0.2 - Type: ec2:instance, Name: batch, Region: us-east-1, ARN/ID: i-2"


class InterleavingConnection:
    """첫 SELECT 직후 콜백을 실행하는 조회 연결 래퍼"""

    def __init__(self, conn, after_first_select):
        self._conn = conn
        self._after_first_select = after_first_select
        self.selects = 0

    def execute(self, sql, *args):
        cursor = self._conn.execute(sql, *args)
        if sql.lstrip().upper().startswith("SELECT"):
            self.selects += 1
            if self.selects == 1:
                self._after_first_select()
        return cursor

    def __getattr__(self, name):
        return getattr(self._conn, name)


class TestConsistentReads:
    """조회 중 커밋된 배치가 결과에 섞이지 않는지 테스트"""

    def test_list_resources_sees_single_commit(self, store, monkeypatch):
        store.persist([make_record("r1", addresses=["10.0.0.1"], labels={"v": "old"})])

        connect_reader = store.connect_reader
        wrappers = []

        def interleaved():
            wrapper = InterleavingConnection(
                connect_reader(),
                lambda: store.persist([make_record("r1", addresses=["10.9.9.9"], labels={"v": "new"})]),
            )
            wrappers.append(wrapper)
            return wrapper

        monkeypatch.setattr(store, "connect_reader", interleaved)
        result = list_resources(store)

        assert wrappers[0].selects == 2
        assert result[0].labels == {"v": "old"}
        assert result[0].addresses == ["10.0.0.1"]

        monkeypatch.setattr(store, "connect_reader", connect_reader)
        updated = list_resources(store)[0]
        assert updated.labels == {"v": "new"}
        assert updated.addresses == ["10.9.9.9"]

    def test_identify_ip_sees_single_commit(self, store, monkeypatch):
        store.persist([make_record("r1", "before", addresses=["10.0.0.1"])])

        connect_reader = store.connect_reader
        monkeypatch.setattr(
            store,
            "connect_reader",
            lambda: InterleavingConnection(
                connect_reader(),
                lambda: store.persist([make_record("r1", "after", addresses=["10.9.9.9"])]),
            ),
        )
        found = identify_ip(store, "10.0.0.1")

        assert found is not None
        assert found.name == "before"
        assert found.addresses == ["10.0.0.1"]
