"""
awsinv/inventory/services/dns.py - Route 53 Hosted Zone 수집 (글로벌 서비스)
"""

from __future__ import annotations

import logging

from awsinv.config import settings
from awsinv.parallel import ErrorCollector, ErrorSeverity, get_client, try_or_default

from ..types import GLOBAL_LOCATION, KIND_ROUTE53_ZONE, ResourceRecord
from .helpers import chunked, parse_tags

logger = logging.getLogger(__name__)


def zone_resource_id(zone_id: str) -> str:
    """'/hostedzone/Z123' → 'Z123'"""
    return zone_id.rsplit("/", 1)[-1]


def collect_route53_hosted_zones(session, region: str, errors: ErrorCollector | None = None) -> list[ResourceRecord]:
    """Route 53 Hosted Zone 리소스를 수집합니다.

    리전과 무관하게 한 번만 호출되며 location은 항상 "global"입니다.
    태그는 list_tags_for_resources로 최대 10개씩 일괄 조회합니다.

    Args:
        session: boto3 Session 객체
        region: 클라이언트 리전 (us-east-1)
        errors: 태그 배치 실패를 기록할 수집기

    Returns:
        ResourceRecord 목록
    """
    route53 = get_client(session, "route53", region_name=region)

    zones = []
    paginator = route53.get_paginator("list_hosted_zones")
    for page in paginator.paginate():
        for zone in page.get("HostedZones", []):
            if not zone.get("Id"):
                logger.debug("Id 없는 Hosted Zone 제외")
                continue
            zones.append(zone)

    tags_map: dict[str, dict[str, str]] = {}
    resource_ids = [zone_resource_id(z["Id"]) for z in zones]
    for batch in chunked(resource_ids, settings.ROUTE53_TAG_BATCH_SIZE):
        resp = try_or_default(
            lambda batch=batch: route53.list_tags_for_resources(ResourceType="hostedzone", ResourceIds=list(batch)),
            default={},
            collector=errors,
            region=GLOBAL_LOCATION,
            operation="list_tags_for_resources",
            severity=ErrorSeverity.WARNING,
            resource_id=f"{len(batch)} hosted zones",
        )
        for tag_set in resp.get("ResourceTagSets", []):
            tags_map[tag_set.get("ResourceId", "")] = parse_tags(tag_set.get("Tags"))

    records = []
    for zone in zones:
        config = zone.get("Config", {})
        records.append(
            ResourceRecord(
                identifier=zone["Id"],
                display_name=zone.get("Name", ""),
                kind=KIND_ROUTE53_ZONE,
                location=GLOBAL_LOCATION,
                labels=tags_map.get(zone_resource_id(zone["Id"]), {}),
                attributes={
                    "private_zone": config.get("PrivateZone", False),
                    "resource_record_set_count": zone.get("ResourceRecordSetCount", 0),
                    "comment": config.get("Comment"),
                },
            )
        )

    return records
