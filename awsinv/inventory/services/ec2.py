"""
awsinv/inventory/services/ec2.py - EC2 인스턴스 수집
"""

from __future__ import annotations

import logging

from awsinv.parallel import ErrorCollector, get_client

from ..types import KIND_EC2_INSTANCE, ResourceRecord
from .helpers import isoformat, parse_tags, valid_addresses

logger = logging.getLogger(__name__)


def partition_for_region(region: str) -> str:
    if region.startswith("cn-"):
        return "aws-cn"
    if region.startswith("us-gov-"):
        return "aws-us-gov"
    return "aws"


def instance_arn(region: str, owner_id: str, instance_id: str) -> str:
    """인스턴스 ARN 생성 (OwnerId가 없으면 인스턴스 ID 그대로)"""
    if not owner_id:
        return instance_id
    return f"arn:{partition_for_region(region)}:ec2:{region}:{owner_id}:instance/{instance_id}"


def _instance_addresses(inst: dict) -> list[str]:
    """Primary private/public IP, ENI 보조 private IP, IPv6 순서로 수집"""
    candidates: list[str | None] = [inst.get("PrivateIpAddress"), inst.get("PublicIpAddress")]
    for eni in inst.get("NetworkInterfaces", []):
        for private in eni.get("PrivateIpAddresses", []):
            candidates.append(private.get("PrivateIpAddress"))
            candidates.append(private.get("Association", {}).get("PublicIp"))
        for ipv6 in eni.get("Ipv6Addresses", []):
            candidates.append(ipv6.get("Ipv6Address"))
    if inst.get("Ipv6Address"):
        candidates.append(inst["Ipv6Address"])
    return valid_addresses(candidates, inst.get("InstanceId", ""))


def collect_ec2_instances(session, region: str, errors: ErrorCollector | None = None) -> list[ResourceRecord]:
    """EC2 Instance 리소스를 수집합니다.

    Name 태그를 표시 이름으로 사용하고, 인스턴스의 모든 ENI IP를 주소로 기록합니다.

    Args:
        session: boto3 Session 객체
        region: AWS 리전 코드
        errors: 단위 에러 수집기 (EC2는 부분 실패 없음)

    Returns:
        ResourceRecord 목록
    """
    ec2 = get_client(session, "ec2", region_name=region)
    records = []

    paginator = ec2.get_paginator("describe_instances")
    for page in paginator.paginate():
        for reservation in page.get("Reservations", []):
            owner_id = reservation.get("OwnerId", "")
            for inst in reservation.get("Instances", []):
                instance_id = inst.get("InstanceId")
                if not instance_id:
                    logger.debug("InstanceId 없는 항목 제외 (%s)", region)
                    continue

                tags = parse_tags(inst.get("Tags"))

                records.append(
                    ResourceRecord(
                        identifier=instance_arn(region, owner_id, instance_id),
                        display_name=tags.get("Name", ""),
                        kind=KIND_EC2_INSTANCE,
                        location=region,
                        network_addresses=_instance_addresses(inst),
                        labels=tags,
                        attributes={
                            "instance_id": instance_id,
                            "instance_type": inst.get("InstanceType"),
                            "state": inst.get("State", {}).get("Name"),
                            "vpc_id": inst.get("VpcId"),
                            "subnet_id": inst.get("SubnetId"),
                            "availability_zone": inst.get("Placement", {}).get("AvailabilityZone"),
                            "launch_time": isoformat(inst.get("LaunchTime")),
                        },
                    )
                )

    return records
