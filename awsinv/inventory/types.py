"""
awsinv/inventory/types.py - 정규화된 리소스 레코드

모든 서비스 수집기는 서비스별 응답을 ResourceRecord 하나로 변환합니다.
저장소는 ``identifier``를 기준으로 멱등 저장합니다.

Kind:
- ec2:instance, elbv2:loadbalancer, rds:db_instance, dynamodb:table
- elasticache:cluster, route53:hostedzone, eks:pod, s3:bucket
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from awsinv.config import settings

from .ip import normalize_ip

KIND_EC2_INSTANCE = "ec2:instance"
KIND_ELB_LOADBALANCER = "elbv2:loadbalancer"
KIND_RDS_INSTANCE = "rds:db_instance"
KIND_DYNAMODB_TABLE = "dynamodb:table"
KIND_ELASTICACHE_CLUSTER = "elasticache:cluster"
KIND_ROUTE53_ZONE = "route53:hostedzone"
KIND_EKS_POD = "eks:pod"
KIND_S3_BUCKET = "s3:bucket"

GLOBAL_LOCATION = settings.GLOBAL_LOCATION

# 짧은 서비스 이름 → kind (query 필터, CLI에서 사용)
SERVICE_ALIASES: dict[str, str] = {
    "ec2": KIND_EC2_INSTANCE,
    "elb": KIND_ELB_LOADBALANCER,
    "rds": KIND_RDS_INSTANCE,
    "dynamodb": KIND_DYNAMODB_TABLE,
    "elasticache": KIND_ELASTICACHE_CLUSTER,
    "route53": KIND_ROUTE53_ZONE,
    "eks": KIND_EKS_POD,
    "s3": KIND_S3_BUCKET,
}


def resolve_kind(alias: str) -> str:
    """서비스 별칭을 kind로 변환 (모르는 값은 그대로 반환)"""
    return SERVICE_ALIASES.get(alias.strip().lower(), alias.strip())


@dataclass
class ResourceRecord:
    """정규화된 리소스 레코드

    Attributes:
        identifier: 전역 고유 식별자 (ARN, zone ID, region/cluster/ns/pod 등)
        display_name: 표시 이름 (비어 있으면 identifier)
        kind: 리소스 종류 (예: ec2:instance)
        location: 리전 또는 "global"
        network_addresses: IP 주소 목록 (정규화, 중복 제거, 순서 유지)
        labels: 태그/레이블
        attributes: 서비스별 상세 정보 (JSON 직렬화 가능한 값)

    Raises:
        ValueError: identifier가 비었거나 IP 주소 형식이 잘못된 경우
    """

    identifier: str
    display_name: str = ""
    kind: str = ""
    location: str = GLOBAL_LOCATION
    network_addresses: list[str] = field(default_factory=list)
    labels: dict[str, str] = field(default_factory=dict)
    attributes: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.identifier or not self.identifier.strip():
            raise ValueError("ResourceRecord.identifier must not be empty")
        if not self.display_name:
            self.display_name = self.identifier

        seen: dict[str, None] = {}
        for address in self.network_addresses:
            seen.setdefault(normalize_ip(address), None)
        self.network_addresses = list(seen)

        self.labels = {str(k): "" if v is None else str(v) for k, v in self.labels.items()}

    def to_dict(self) -> dict[str, Any]:
        return {
            "identifier": self.identifier,
            "display_name": self.display_name,
            "kind": self.kind,
            "location": self.location,
            "network_addresses": list(self.network_addresses),
            "labels": dict(self.labels),
            "attributes": self.attributes,
        }
