"""
awsinv/inventory/services/storage.py - S3 Bucket 수집

버킷 목록은 한 번만 조회하고, 버킷별 상세(실제 리전, 객체 수, 총 크기,
최신 객체 N개, 태그)는 버킷마다 하나의 작업으로 동시에 조회합니다.
한 버킷의 실패는 해당 버킷만 제외하고 개별 보고됩니다.
"""

from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from awsinv.config import settings
from awsinv.exceptions import is_not_found
from awsinv.parallel import ErrorCollector, ErrorSeverity, fan_out, get_client

from ..types import KIND_S3_BUCKET, ResourceRecord
from .helpers import isoformat, parse_tags

logger = logging.getLogger(__name__)

# get_bucket_location의 레거시 LocationConstraint 값
_LEGACY_LOCATIONS = {None: "us-east-1", "": "us-east-1", "EU": "eu-west-1"}


class RecentObjects:
    """최신 객체 N개만 유지하는 정렬 버퍼

    전체 객체 목록을 메모리에 올리지 않고 LastModified 기준 상위 N개를 유지합니다.
    버퍼가 차기 전에는 삽입하고, 찬 뒤에는 가장 오래된 항목보다 새로운 경우에만 교체합니다.
    항목은 오래된 순으로 정렬되어 있습니다.
    """

    def __init__(self, capacity: int = settings.S3_RECENT_OBJECT_COUNT):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._items: list[tuple[datetime, str, int]] = []

    def __len__(self) -> int:
        return len(self._items)

    def offer(self, key: str, last_modified: datetime, size: int = 0) -> None:
        item = (last_modified, key, size)
        if len(self._items) < self.capacity:
            bisect.insort(self._items, item)
        elif last_modified > self._items[0][0]:
            self._items[0] = item
            self._items.sort()

    def newest_first(self) -> list[dict[str, Any]]:
        return [
            {"key": key, "last_modified": isoformat(modified), "size": size}
            for modified, key, size in reversed(self._items)
        ]


@dataclass
class BucketDetail:
    """버킷 상세 조회 결과"""

    name: str
    region: str
    object_count: int = 0
    total_size_bytes: int = 0
    recent: RecentObjects = field(default_factory=RecentObjects)
    tags: dict[str, str] = field(default_factory=dict)


def bucket_region(s3, bucket_name: str) -> str:
    """버킷의 실제 리전 조회"""
    constraint = s3.get_bucket_location(Bucket=bucket_name).get("LocationConstraint")
    return _LEGACY_LOCATIONS.get(constraint, constraint)


def _bucket_tags(s3, bucket_name: str) -> dict[str, str]:
    """버킷 태그 조회 (태그가 없으면 NoSuchTagSet 에러가 발생하므로 빈 딕셔너리)"""
    try:
        resp = s3.get_bucket_tagging(Bucket=bucket_name)
    except Exception as e:
        if is_not_found(e):
            return {}
        raise
    return parse_tags(resp.get("TagSet"))


def fetch_bucket_detail(session, bucket_name: str, errors: ErrorCollector | None = None) -> BucketDetail:
    """버킷 하나의 상세 정보 조회 (fan-out 작업 단위)

    리전 조회나 객체 목록 조회 실패는 예외로 전파되어 해당 버킷 작업의 실패가 됩니다.
    태그 조회 실패는 경고만 남기고 빈 태그로 진행합니다.
    """
    s3 = get_client(session, "s3", region_name=settings.GLOBAL_API_REGION)
    region = bucket_region(s3, bucket_name)
    regional = get_client(session, "s3", region_name=region)

    detail = BucketDetail(name=bucket_name, region=region)
    paginator = regional.get_paginator("list_objects_v2")
    for page in paginator.paginate(Bucket=bucket_name):
        for obj in page.get("Contents", []):
            detail.object_count += 1
            detail.total_size_bytes += obj.get("Size", 0)
            if obj.get("LastModified") is not None:
                detail.recent.offer(obj.get("Key", ""), obj["LastModified"], obj.get("Size", 0))

    try:
        detail.tags = _bucket_tags(regional, bucket_name)
    except Exception as e:
        if errors is None:
            raise
        errors.collect(e, region, "get_bucket_tagging", ErrorSeverity.WARNING, bucket_name)

    return detail


def collect_s3_buckets(session, region: str, errors: ErrorCollector | None = None) -> list[ResourceRecord]:
    """S3 Bucket 리소스를 수집합니다 (글로벌 목록, 버킷별 동시 상세 조회).

    Args:
        session: boto3 Session 객체
        region: 목록 조회 리전 (us-east-1)
        errors: 버킷 단위 실패를 기록할 수집기

    Returns:
        상세 조회에 성공한 버킷의 ResourceRecord 목록
    """
    s3 = get_client(session, "s3", region_name=region)

    buckets: dict[str, dict] = {}
    paginator = s3.get_paginator("list_buckets")
    for page in paginator.paginate():
        for bucket in page.get("Buckets", []):
            if not bucket.get("Name"):
                logger.debug("Name 없는 버킷 제외")
                continue
            buckets[bucket["Name"]] = bucket

    if not buckets:
        return []

    logger.info("S3 버킷 %d개 상세 조회", len(buckets))
    result = fan_out(
        buckets,
        lambda name: fetch_bucket_detail(session, name, errors),
        key=str,
        region=region,
        max_workers=len(buckets),
    )

    for failed in result.failed:
        if errors is not None and failed.error is not None and failed.error.original_exception is not None:
            errors.collect(
                failed.error.original_exception, region, "bucket_detail", ErrorSeverity.WARNING, failed.identifier
            )
        else:
            logger.warning("버킷 상세 조회 실패: %s", failed.error)

    records = []
    for detail in result.get_data():
        bucket = buckets[detail.name]
        records.append(
            ResourceRecord(
                identifier=f"arn:aws:s3:::{detail.name}",
                display_name=detail.name,
                kind=KIND_S3_BUCKET,
                location=detail.region,
                labels=detail.tags,
                attributes={
                    "creation_date": isoformat(bucket.get("CreationDate")),
                    "object_count": detail.object_count,
                    "total_size_bytes": detail.total_size_bytes,
                    "recent_objects": detail.recent.newest_first(),
                },
            )
        )

    return records
