"""
tests/conftest.py - pytest 공통 픽스처

AWS API 모킹과 테스트 헬퍼를 제공합니다.

Usage:
    def test_something(mock_session, make_paginator):
        client = MagicMock()
        client.get_paginator.return_value = make_paginator([{"Reservations": []}])
        mock_session.client.return_value = client
"""

from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from awsinv.inventory.types import ResourceRecord
from awsinv.store import InventoryStore

# =============================================================================
# 환경 설정
# =============================================================================


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """테스트 환경 설정 (실제 자격 증명/프로파일 사용 방지)"""
    monkeypatch.setenv("AWS_DEFAULT_REGION", "ap-northeast-2")
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.delenv("AWS_PROFILE", raising=False)
    monkeypatch.delenv("AWS_INVENTORY_DB", raising=False)
    monkeypatch.delenv("AWS_INVENTORY_LOG_LEVEL", raising=False)
    yield


# =============================================================================
# AWS 모킹 픽스처
# =============================================================================


@pytest.fixture
def mock_session():
    """boto3.Session 모킹 (session.client()는 같은 MagicMock 반환)"""
    session = MagicMock()
    session.client.return_value = MagicMock()
    session.region_name = "ap-northeast-2"
    return session


def create_paginator(pages: list[dict[str, Any]]) -> MagicMock:
    """paginate()가 주어진 페이지를 반환하는 paginator 모킹"""
    paginator = MagicMock()
    paginator.paginate.return_value = iter(pages)
    return paginator


@pytest.fixture
def make_paginator():
    return create_paginator


def create_mock_client_error(
    error_code: str,
    error_message: str = "Test error",
) -> Exception:
    """ClientError 생성 헬퍼"""
    from botocore.exceptions import ClientError

    return ClientError(
        {
            "Error": {
                "Code": error_code,
                "Message": error_message,
            }
        },
        "TestOperation",
    )


class FakeAuth:
    """AuthContext 대용 (리전별 MagicMock 세션 반환)"""

    def __init__(self, session: Any = None, profile_name: str | None = None):
        self._session = session if session is not None else MagicMock()
        self.profile_name = profile_name
        self.requested_regions: list[str] = []

    def session(self, region: str | None = None):
        self.requested_regions.append(region or "")
        return self._session


@pytest.fixture
def fake_auth(mock_session):
    return FakeAuth(mock_session)


# =============================================================================
# 저장소 픽스처
# =============================================================================


@pytest.fixture
def store(tmp_path: Path):
    """임시 디렉토리의 InventoryStore"""
    with InventoryStore(tmp_path / "inventory.db") as s:
        yield s


def make_record(
    identifier: str,
    name: str = "",
    kind: str = "ec2:instance",
    location: str = "ap-northeast-2",
    addresses: list[str] | None = None,
    labels: dict[str, str] | None = None,
    attributes: dict[str, Any] | None = None,
) -> ResourceRecord:
    """ResourceRecord 생성 헬퍼"""
    return ResourceRecord(
        identifier=identifier,
        display_name=name,
        kind=kind,
        location=location,
        network_addresses=addresses or [],
        labels=labels or {},
        attributes=attributes or {},
    )


# =============================================================================
# moto 통합 (선택적)
# =============================================================================

try:
    import moto

    @pytest.fixture
    def aws_credentials(monkeypatch):
        """moto 사용 시 AWS 자격 증명 설정"""
        monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
        monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
        monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
        monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
        monkeypatch.setenv("AWS_DEFAULT_REGION", "ap-northeast-2")

    @pytest.fixture
    def moto_session(aws_credentials):
        """moto를 사용한 boto3 Session"""
        with moto.mock_aws():
            import boto3

            yield boto3.Session(region_name="ap-northeast-2")

except ImportError:
    # moto가 설치되지 않은 경우 더미 픽스처
    @pytest.fixture
    def moto_session():
        pytest.skip("moto not installed")
