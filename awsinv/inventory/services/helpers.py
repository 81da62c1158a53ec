"""
awsinv/inventory/services/helpers.py - 수집기 공용 유틸리티

태그 파싱, 배치 분할, IP 주소 필터링, 시각 직렬화를 제공합니다.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from datetime import datetime
from typing import Any, TypeVar

from ..ip import normalize_ip

logger = logging.getLogger(__name__)

T = TypeVar("T")


def parse_tags(tags: list[dict[str, Any]] | None) -> dict[str, str]:
    """AWS 태그 리스트([{"Key": k, "Value": v}])를 딕셔너리로 변환"""
    if not tags:
        return {}
    return {t["Key"]: t.get("Value", "") or "" for t in tags if t.get("Key")}


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """size 단위로 분할 (API 배치 제한 대응)"""
    for i in range(0, len(items), size):
        yield items[i : i + size]


def valid_addresses(candidates: Iterable[str | None], identifier: str = "") -> list[str]:
    """IP 후보 중 유효한 주소만 정규화하여 반환 (빈 값 무시, 잘못된 값은 로그 후 제외)"""
    addresses: list[str] = []
    for value in candidates:
        if not value:
            continue
        try:
            address = normalize_ip(value)
        except ValueError:
            logger.debug("잘못된 IP 주소 제외 [%s]: %r", identifier, value)
            continue
        if address not in addresses:
            addresses.append(address)
    return addresses


def isoformat(value: Any) -> str | None:
    """datetime → ISO 8601 문자열 (None/문자열은 그대로)"""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)
