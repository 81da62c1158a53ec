"""
awsinv/auth.py - 프로파일 기반 인증 컨텍스트

프로파일 하나로 리전별 boto3 Session을 만들고, 리전 목록의 ``all``을
활성화된 전체 리전으로 확장합니다.

Usage:
    auth = AuthContext("my-profile")
    regions = auth.resolve_regions(["all"])
    ec2 = get_client(auth.session(regions[0]), "ec2", region_name=regions[0])
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence

import boto3

from awsinv.config import get_default_region, settings
from awsinv.exceptions import ConfigurationError, format_error_for_user, is_auth_failure
from awsinv.parallel.client import get_client

logger = logging.getLogger(__name__)

ALL_REGIONS_KEYWORD = "all"


class AuthContext:
    """단일 프로파일 인증 컨텍스트

    리전별 Session을 캐시하며 여러 스레드에서 안전하게 사용할 수 있습니다.

    Attributes:
        profile_name: AWS 프로파일 이름 (None이면 기본 자격 증명 체인)
    """

    def __init__(self, profile_name: str | None = None):
        self.profile_name = profile_name or None
        self._sessions: dict[str, boto3.Session] = {}
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"AuthContext(profile_name={self.profile_name!r})"

    def session(self, region: str | None = None) -> boto3.Session:
        """리전용 boto3 Session 반환

        Raises:
            ConfigurationError: 프로파일을 찾을 수 없는 경우
        """
        region_name = region or get_default_region()
        with self._lock:
            cached = self._sessions.get(region_name)
            if cached is not None:
                return cached
            try:
                session = boto3.Session(profile_name=self.profile_name, region_name=region_name)
            except Exception as e:
                if is_auth_failure(e):
                    raise ConfigurationError("profile", format_error_for_user(e), cause=e) from e
                raise
            self._sessions[region_name] = session
            return session

    def resolve_regions(self, regions: Sequence[str]) -> list[str]:
        """리전 목록 정규화

        - ``all``이 포함되면 describe_regions로 활성화된 전체 리전 반환
        - 빈 목록이면 기본 리전 하나
        - 중복은 첫 등장 순서로 제거

        Args:
            regions: CLI 등에서 받은 리전 목록

        Returns:
            수집 대상 리전 목록

        Raises:
            ConfigurationError: 전체 리전 조회 실패 (자격 증명, 엔드포인트 연결)
        """
        requested = [r.strip() for r in regions if r and r.strip()]

        if any(r.lower() == ALL_REGIONS_KEYWORD for r in requested):
            return self._describe_regions()

        if not requested:
            return [get_default_region()]

        return list(dict.fromkeys(requested))

    def _describe_regions(self) -> list[str]:
        ec2 = get_client(self.session(settings.GLOBAL_API_REGION), "ec2", region_name=settings.GLOBAL_API_REGION)
        try:
            response = ec2.describe_regions()
        except Exception as e:
            if is_auth_failure(e):
                raise ConfigurationError("credentials", format_error_for_user(e), cause=e) from e
            raise ConfigurationError("endpoint", f"리전 목록 조회 실패 - {format_error_for_user(e)}", cause=e) from e
        regions = sorted(r["RegionName"] for r in response.get("Regions", []) if r.get("RegionName"))
        logger.info("전체 리전 확장: %d개", len(regions))
        return regions
