"""
awsinv/store/db.py - SQLite 인벤토리 저장소

스키마:
    resources(id, identifier UNIQUE, kind, location, name, attributes JSON)
    labels(resource_id, key, value)          PK(resource_id, key)
    addresses(resource_id, address, is_public) PK(resource_id, address)

저장은 identifier 기준 멱등입니다. 같은 identifier를 다시 저장하면 resources 행은
제자리에서 갱신되어 id가 유지되고, labels/addresses는 새 값으로 완전히 교체됩니다.
배치 하나는 트랜잭션 하나이며 실패 시 전체 롤백됩니다.

Usage:
    with InventoryStore("aws_inventory.db") as store:
        store.persist(records)
        print(store.counts())
"""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path

from awsinv.exceptions import PersistenceError
from awsinv.inventory.ip import is_public
from awsinv.inventory.types import ResourceRecord

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS resources (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    identifier  TEXT NOT NULL UNIQUE,
    kind        TEXT NOT NULL,
    location    TEXT NOT NULL,
    name        TEXT NOT NULL,
    attributes  TEXT NOT NULL DEFAULT '{}'
);

CREATE TABLE IF NOT EXISTS labels (
    resource_id INTEGER NOT NULL REFERENCES resources(id) ON DELETE CASCADE,
    key         TEXT NOT NULL,
    value       TEXT NOT NULL,
    PRIMARY KEY (resource_id, key)
);

CREATE TABLE IF NOT EXISTS addresses (
    resource_id INTEGER NOT NULL REFERENCES resources(id) ON DELETE CASCADE,
    address     TEXT NOT NULL,
    is_public   INTEGER NOT NULL,
    PRIMARY KEY (resource_id, address)
);

CREATE INDEX IF NOT EXISTS idx_addresses_address ON addresses(address);
CREATE INDEX IF NOT EXISTS idx_labels_key_value ON labels(key, value);
"""


class InventoryStore:
    """SQLite 인벤토리 저장소

    쓰기는 lock으로 직렬화됩니다 (한 번에 하나의 writer).

    Attributes:
        path: DB 파일 경로
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.Lock()
        try:
            if self.path.parent and not self.path.parent.exists():
                self.path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(self.path), check_same_thread=False, isolation_level=None)
            self._conn.execute("PRAGMA foreign_keys = ON;")
            try:
                self._conn.execute("PRAGMA journal_mode = WAL;")
            except sqlite3.OperationalError:
                self._conn.execute("PRAGMA journal_mode = DELETE;")
            self._conn.executescript(SCHEMA)
        except (sqlite3.Error, OSError) as e:
            raise PersistenceError(f"저장소를 열 수 없습니다: {self.path}", cause=e) from e
        logger.debug("저장소 열기: %s", self.path)

    def __repr__(self) -> str:
        return f"InventoryStore({str(self.path)!r})"

    def __enter__(self) -> InventoryStore:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    # =========================================================================
    # 쓰기
    # =========================================================================

    def persist(self, records: Iterable[ResourceRecord]) -> int:
        """레코드 배치를 하나의 트랜잭션으로 저장

        같은 배치 안에 identifier가 중복되면 뒤의 레코드가 남습니다.

        Args:
            records: 저장할 ResourceRecord

        Returns:
            저장된 리소스 수 (배치 내 서로 다른 identifier 수)

        Raises:
            PersistenceError: 저장 실패 (배치 전체 롤백)
        """
        batch = list(records)
        if not batch:
            return 0

        with self._lock:
            current: ResourceRecord | None = None
            try:
                self._conn.execute("BEGIN IMMEDIATE")
                for current in batch:
                    self._write(current)
                self._conn.execute("COMMIT")
            except Exception as e:
                if self._conn.in_transaction:
                    self._conn.execute("ROLLBACK")
                identifier = current.identifier if current is not None else None
                raise PersistenceError(
                    f"배치 저장 실패 ({len(batch)}건 롤백)", identifier=identifier, batch_size=len(batch), cause=e
                ) from e

        saved = len({record.identifier for record in batch})
        logger.debug("저장 완료: %d건 (레코드 %d건)", saved, len(batch))
        return saved

    def _write(self, record: ResourceRecord) -> None:
        attributes = json.dumps(record.attributes, default=str, ensure_ascii=False)

        row = self._conn.execute("SELECT id FROM resources WHERE identifier = ?", (record.identifier,)).fetchone()
        if row is None:
            cursor = self._conn.execute(
                "INSERT INTO resources (identifier, kind, location, name, attributes) VALUES (?, ?, ?, ?, ?)",
                (record.identifier, record.kind, record.location, record.display_name, attributes),
            )
            resource_id = cursor.lastrowid
        else:
            resource_id = row[0]
            self._conn.execute(
                "UPDATE resources SET kind = ?, location = ?, name = ?, attributes = ? WHERE id = ?",
                (record.kind, record.location, record.display_name, attributes, resource_id),
            )
            self._conn.execute("DELETE FROM labels WHERE resource_id = ?", (resource_id,))
            self._conn.execute("DELETE FROM addresses WHERE resource_id = ?", (resource_id,))

        self._conn.executemany(
            "INSERT OR REPLACE INTO labels (resource_id, key, value) VALUES (?, ?, ?)",
            [(resource_id, key, value) for key, value in record.labels.items()],
        )
        self._conn.executemany(
            "INSERT OR REPLACE INTO addresses (resource_id, address, is_public) VALUES (?, ?, ?)",
            [(resource_id, address, int(is_public(address))) for address in record.network_addresses],
        )

    def remove(self, identifiers: Iterable[str]) -> int:
        """identifier로 리소스와 하위 행 삭제

        Returns:
            삭제된 리소스 수

        Raises:
            PersistenceError: 삭제 실패 (롤백)
        """
        targets = list(identifiers)
        if not targets:
            return 0

        removed = 0
        with self._lock:
            try:
                self._conn.execute("BEGIN IMMEDIATE")
                for identifier in targets:
                    row = self._conn.execute("SELECT id FROM resources WHERE identifier = ?", (identifier,)).fetchone()
                    if row is None:
                        continue
                    self._conn.execute("DELETE FROM labels WHERE resource_id = ?", (row[0],))
                    self._conn.execute("DELETE FROM addresses WHERE resource_id = ?", (row[0],))
                    self._conn.execute("DELETE FROM resources WHERE id = ?", (row[0],))
                    removed += 1
                self._conn.execute("COMMIT")
            except Exception as e:
                if self._conn.in_transaction:
                    self._conn.execute("ROLLBACK")
                raise PersistenceError("삭제 실패", batch_size=len(targets), cause=e) from e
        return removed

    # =========================================================================
    # 읽기
    # =========================================================================

    def counts(self) -> dict[str, int]:
        """테이블별 행 수"""
        with self._lock:
            return {
                table: self._conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
                for table in ("resources", "labels", "addresses")
            }

    def connect_reader(self) -> sqlite3.Connection:
        """조회 전용 연결 생성 (호출자가 close)"""
        uri = f"{self.path.resolve().as_uri()}?mode=ro"
        conn = sqlite3.connect(uri, uri=True, check_same_thread=False, isolation_level=None)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def snapshot(self) -> Iterator[sqlite3.Connection]:
        """읽기 트랜잭션 하나로 묶인 조회 연결

        블록 안의 모든 SELECT는 같은 커밋 시점을 봅니다. 도중에 persist가
        커밋되어도 블록이 끝날 때까지 반영되지 않습니다.
        """
        conn = self.connect_reader()
        try:
            conn.execute("BEGIN")
            yield conn
        finally:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            conn.close()
