"""
awsinv/store/query.py - 인벤토리 조회

저장소를 읽기만 합니다.

- list_resources: 서비스/리전 필터 조회 (같은 차원 내 OR, 차원 간 AND)
- identify_ip: IP 주소 소유 리소스 조회 (여러 개면 가장 먼저 저장된 리소스)
"""

from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from awsinv.inventory.ip import IPAddress, normalize_ip
from awsinv.inventory.types import resolve_kind

if TYPE_CHECKING:
    from .db import InventoryStore

logger = logging.getLogger(__name__)

_SELECT_RESOURCES = """
SELECT
    r.id,
    r.identifier,
    r.name,
    r.kind,
    r.location,
    r.attributes,
    (SELECT json_group_object(l.key, l.value) FROM labels l WHERE l.resource_id = r.id) AS labels
FROM resources r
"""


@dataclass
class ResourceSummary:
    """조회 결과 리소스

    Attributes:
        id: 저장소 내부 ID (저장 순서)
        identifier: 리소스 식별자
        name: 표시 이름
        kind: 리소스 종류
        location: 리전 또는 "global"
        addresses: IP 주소 (저장 순서)
        labels: 태그/레이블
        attributes: 서비스별 상세 정보
    """

    id: int
    identifier: str
    name: str
    kind: str
    location: str
    addresses: list[str] = field(default_factory=list)
    labels: dict[str, str] = field(default_factory=dict)
    attributes: Any = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "identifier": self.identifier,
            "name": self.name,
            "kind": self.kind,
            "location": self.location,
            "addresses": list(self.addresses),
            "labels": dict(self.labels),
            "attributes": self.attributes,
        }

    def describe(self, ip: str | None = None) -> str:
        """한 줄 요약 (IP 조회 결과 출력용)"""
        prefix = f"IP: {ip} - " if ip else ""
        return f"{prefix}Type: {self.kind}, Name: {self.name}, Region: {self.location}, ARN/ID: {self.identifier}"


def _decode(value: str | None, default: Any) -> Any:
    if not value:
        return default
    try:
        return json.loads(value)
    except ValueError:
        logger.debug("JSON 디코딩 실패: %r", value)
        return default


def _fetch(conn: sqlite3.Connection, where: str, params: Sequence[Any]) -> list[ResourceSummary]:
    """리소스/레이블과 주소를 조회 (같은 읽기 트랜잭션 안에서 호출)"""
    rows = conn.execute(f"{_SELECT_RESOURCES} {where} ORDER BY r.id", params).fetchall()
    summaries = {
        row["id"]: ResourceSummary(
            id=row["id"],
            identifier=row["identifier"],
            name=row["name"],
            kind=row["kind"],
            location=row["location"],
            labels=_decode(row["labels"], {}),
            attributes=_decode(row["attributes"], {}),
        )
        for row in rows
    }
    if not summaries:
        return []

    # 주소는 저장 순서(rowid) 유지
    address_rows = conn.execute(
        f"SELECT a.resource_id, a.address FROM addresses a JOIN resources r ON r.id = a.resource_id {where} "
        "ORDER BY a.rowid",
        params,
    ).fetchall()
    for row in address_rows:
        summary = summaries.get(row["resource_id"])
        if summary is not None:
            summary.addresses.append(row["address"])

    return list(summaries.values())


def _in_clause(column: str, values: Sequence[str]) -> str:
    return f"{column} IN ({', '.join('?' for _ in values)})"


def list_resources(
    store: InventoryStore,
    services: Sequence[str] = (),
    regions: Sequence[str] = (),
) -> list[ResourceSummary]:
    """서비스/리전으로 필터링한 리소스 목록

    Args:
        store: 인벤토리 저장소
        services: 서비스 별칭 또는 kind (비어 있으면 전체)
        regions: 리전 (비어 있으면 전체)

    Returns:
        ResourceSummary 목록 (저장 순서)
    """
    clauses: list[str] = []
    params: list[str] = []

    kinds = [resolve_kind(s) for s in services if s.strip()]
    if kinds:
        clauses.append(_in_clause("r.kind", kinds))
        params.extend(kinds)

    locations = [r.strip() for r in regions if r.strip()]
    if locations:
        clauses.append(_in_clause("r.location", locations))
        params.extend(locations)

    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    with store.snapshot() as conn:
        return _fetch(conn, where, params)


def identify_ip(store: InventoryStore, ip: str | IPAddress) -> ResourceSummary | None:
    """IP 주소를 가진 리소스 조회

    주소는 정규화 후 정확히 일치해야 합니다. 여러 리소스가 같은 주소를 가지면
    가장 먼저 저장된(id가 가장 작은) 리소스를 반환합니다.

    Raises:
        ValueError: IP 주소가 아닌 입력
    """
    address = normalize_ip(ip)
    with store.snapshot() as conn:
        row = conn.execute(
            "SELECT MIN(resource_id) AS resource_id FROM addresses WHERE address = ?", (address,)
        ).fetchone()
        if row is None or row["resource_id"] is None:
            return None
        found = _fetch(conn, "WHERE r.id = ?", (row["resource_id"],))
    return found[0] if found else None
