"""
awsinv/store/export.py - hosts 파일 내보내기
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .db import InventoryStore

logger = logging.getLogger(__name__)


def hosts_lines(store: InventoryStore) -> list[str]:
    """저장된 주소마다 "주소<TAB>이름" 한 줄 (주소, 이름 순 정렬)"""
    with store.snapshot() as conn:
        rows = conn.execute(
            "SELECT a.address, r.name FROM addresses a JOIN resources r ON r.id = a.resource_id "
            "ORDER BY a.address, r.name"
        ).fetchall()
    return [f"{row['address']}\t{row['name']}" for row in rows]


def export_hosts(store: InventoryStore, path: str | Path) -> int:
    """hosts 형식 파일로 내보내기

    Returns:
        기록한 줄 수
    """
    lines = hosts_lines(store)
    target = Path(path)
    target.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
    logger.info("hosts 파일 내보내기: %s (%d줄)", target, len(lines))
    return len(lines)
