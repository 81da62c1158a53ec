"""
awsinv/inventory/services/elb.py - ELBv2 로드밸런서 수집
"""

from __future__ import annotations

import logging

from awsinv.config import settings
from awsinv.parallel import ErrorCollector, ErrorSeverity, get_client, try_or_default

from ..types import KIND_ELB_LOADBALANCER, ResourceRecord
from .helpers import chunked, isoformat, parse_tags, valid_addresses

logger = logging.getLogger(__name__)


def _lb_addresses(lb: dict) -> list[str]:
    candidates: list[str | None] = []
    for az in lb.get("AvailabilityZones", []):
        for addr in az.get("LoadBalancerAddresses", []):
            candidates.append(addr.get("IpAddress"))
            candidates.append(addr.get("PrivateIPv4Address"))
            candidates.append(addr.get("IPv6Address"))
    return valid_addresses(candidates, lb.get("LoadBalancerArn", ""))


def _fetch_tags(elbv2, arns: list[str], region: str, errors: ErrorCollector | None) -> dict[str, dict[str, str]]:
    """describe_tags를 ELB_TAG_BATCH_SIZE 단위로 호출

    실패한 배치의 로드밸런서는 빈 태그로 남고 경고가 기록됩니다.
    """
    tags_map: dict[str, dict[str, str]] = {}

    for batch in chunked(arns, settings.ELB_TAG_BATCH_SIZE):
        resp = try_or_default(
            lambda batch=batch: elbv2.describe_tags(ResourceArns=list(batch)),
            default={},
            collector=errors,
            region=region,
            operation="describe_tags",
            severity=ErrorSeverity.WARNING,
            resource_id=f"{len(batch)} load balancers",
        )
        for tag_desc in resp.get("TagDescriptions", []):
            tags_map[tag_desc.get("ResourceArn", "")] = parse_tags(tag_desc.get("Tags"))

    return tags_map


def collect_load_balancers(session, region: str, errors: ErrorCollector | None = None) -> list[ResourceRecord]:
    """ALB/NLB/GWLB 리소스를 수집합니다.

    목록을 모두 조회한 뒤 태그를 배치로 일괄 조회합니다. 주소는 AZ별
    LoadBalancerAddresses(NLB 고정 IP 등)에서만 얻을 수 있습니다.

    Args:
        session: boto3 Session 객체
        region: AWS 리전 코드
        errors: 태그 배치 실패를 기록할 수집기

    Returns:
        ResourceRecord 목록
    """
    elbv2 = get_client(session, "elbv2", region_name=region)

    load_balancers = []
    paginator = elbv2.get_paginator("describe_load_balancers")
    for page in paginator.paginate():
        for lb in page.get("LoadBalancers", []):
            if not lb.get("LoadBalancerArn"):
                logger.debug("ARN 없는 로드밸런서 제외 (%s)", region)
                continue
            load_balancers.append(lb)

    if not load_balancers:
        return []

    tags_map = _fetch_tags(elbv2, [lb["LoadBalancerArn"] for lb in load_balancers], region, errors)

    records = []
    for lb in load_balancers:
        arn = lb["LoadBalancerArn"]
        records.append(
            ResourceRecord(
                identifier=arn,
                display_name=lb.get("LoadBalancerName", ""),
                kind=KIND_ELB_LOADBALANCER,
                location=region,
                network_addresses=_lb_addresses(lb),
                labels=tags_map.get(arn, {}),
                attributes={
                    "dns_name": lb.get("DNSName"),
                    "type": lb.get("Type"),
                    "scheme": lb.get("Scheme"),
                    "vpc_id": lb.get("VpcId"),
                    "state": lb.get("State", {}).get("Code"),
                    "created_time": isoformat(lb.get("CreatedTime")),
                },
            )
        )

    return records
