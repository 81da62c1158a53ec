"""
awsinv/inventory/services/database.py - Database 리소스 수집

RDS Instance, DynamoDB Table, ElastiCache Cluster 수집.
세 서비스 모두 엔드포인트가 호스트명이므로 IP 주소는 기록하지 않고
attributes에만 남깁니다.
"""

from __future__ import annotations

import logging

from awsinv.parallel import ErrorCollector, ErrorSeverity, get_client, try_or_default

from ..types import KIND_DYNAMODB_TABLE, KIND_ELASTICACHE_CLUSTER, KIND_RDS_INSTANCE, ResourceRecord
from .helpers import isoformat, parse_tags

logger = logging.getLogger(__name__)


def collect_rds_instances(session, region: str, errors: ErrorCollector | None = None) -> list[ResourceRecord]:
    """RDS Instance 리소스를 수집합니다.

    태그는 describe_db_instances 응답의 TagList를 사용하므로 추가 호출이 없습니다.

    Args:
        session: boto3 Session 객체
        region: AWS 리전 코드
        errors: 단위 에러 수집기

    Returns:
        ResourceRecord 목록
    """
    rds = get_client(session, "rds", region_name=region)
    records = []

    paginator = rds.get_paginator("describe_db_instances")
    for page in paginator.paginate():
        for db in page.get("DBInstances", []):
            arn = db.get("DBInstanceArn")
            if not arn:
                logger.debug("ARN 없는 DB 인스턴스 제외 (%s)", region)
                continue

            endpoint = db.get("Endpoint") or {}

            records.append(
                ResourceRecord(
                    identifier=arn,
                    display_name=db.get("DBInstanceIdentifier", ""),
                    kind=KIND_RDS_INSTANCE,
                    location=region,
                    labels=parse_tags(db.get("TagList")),
                    attributes={
                        "engine": db.get("Engine"),
                        "engine_version": db.get("EngineVersion"),
                        "instance_class": db.get("DBInstanceClass"),
                        "status": db.get("DBInstanceStatus"),
                        "publicly_accessible": db.get("PubliclyAccessible", False),
                        "multi_az": db.get("MultiAZ", False),
                        "endpoint": endpoint.get("Address"),
                        "port": endpoint.get("Port"),
                    },
                )
            )

    return records


def _dynamodb_tags(dynamodb, table_arn: str) -> dict[str, str]:
    """list_tags_of_resource NextToken 루프"""
    tags: dict[str, str] = {}
    kwargs = {"ResourceArn": table_arn}
    while True:
        resp = dynamodb.list_tags_of_resource(**kwargs)
        tags.update(parse_tags(resp.get("Tags")))
        next_token = resp.get("NextToken")
        if not next_token:
            return tags
        kwargs["NextToken"] = next_token


def collect_dynamodb_tables(session, region: str, errors: ErrorCollector | None = None) -> list[ResourceRecord]:
    """DynamoDB Table 리소스를 수집합니다.

    테이블 이름 목록 조회 후 테이블마다 describe_table과 태그 조회를 수행합니다.
    describe_table 실패 시 해당 테이블만 제외하고, 태그 조회 실패 시 빈 태그로 저장합니다.

    Args:
        session: boto3 Session 객체
        region: AWS 리전 코드
        errors: 단위 에러 수집기

    Returns:
        ResourceRecord 목록
    """
    dynamodb = get_client(session, "dynamodb", region_name=region)

    table_names: list[str] = []
    paginator = dynamodb.get_paginator("list_tables")
    for page in paginator.paginate():
        table_names.extend(page.get("TableNames", []))

    records = []
    for table_name in table_names:
        table = try_or_default(
            lambda name=table_name: dynamodb.describe_table(TableName=name).get("Table", {}),
            default=None,
            collector=errors,
            region=region,
            operation="describe_table",
            resource_id=table_name,
        )
        if not table:
            continue

        table_arn = table.get("TableArn")
        if not table_arn:
            logger.debug("TableArn 없는 테이블 제외: %s", table_name)
            continue

        tags = try_or_default(
            lambda arn=table_arn: _dynamodb_tags(dynamodb, arn),
            default={},
            collector=errors,
            region=region,
            operation="list_tags_of_resource",
            severity=ErrorSeverity.WARNING,
            resource_id=table_name,
        )

        records.append(
            ResourceRecord(
                identifier=table_arn,
                display_name=table.get("TableName", table_name),
                kind=KIND_DYNAMODB_TABLE,
                location=region,
                labels=tags,
                attributes={
                    "item_count": table.get("ItemCount", 0),
                    "table_size_bytes": table.get("TableSizeBytes", 0),
                    "status": table.get("TableStatus"),
                    "billing_mode": table.get("BillingModeSummary", {}).get("BillingMode", "PROVISIONED"),
                    "created_time": isoformat(table.get("CreationDateTime")),
                },
            )
        )

    return records


def collect_elasticache_clusters(session, region: str, errors: ErrorCollector | None = None) -> list[ResourceRecord]:
    """ElastiCache Cluster 리소스를 수집합니다.

    노드 엔드포인트(호스트:포트)는 attributes.node_endpoints에 기록합니다.

    Args:
        session: boto3 Session 객체
        region: AWS 리전 코드
        errors: 단위 에러 수집기

    Returns:
        ResourceRecord 목록
    """
    elasticache = get_client(session, "elasticache", region_name=region)
    records = []

    paginator = elasticache.get_paginator("describe_cache_clusters")
    for page in paginator.paginate(ShowCacheNodeInfo=True):
        for cluster in page.get("CacheClusters", []):
            arn = cluster.get("ARN")
            if not arn:
                logger.debug("ARN 없는 캐시 클러스터 제외 (%s)", region)
                continue

            cluster_id = cluster.get("CacheClusterId", "")
            tags_resp = try_or_default(
                lambda arn=arn: elasticache.list_tags_for_resource(ResourceName=arn),
                default={},
                collector=errors,
                region=region,
                operation="list_tags_for_resource",
                severity=ErrorSeverity.WARNING,
                resource_id=cluster_id,
            )

            node_endpoints = []
            for node in cluster.get("CacheNodes", []):
                endpoint = node.get("Endpoint") or {}
                if endpoint.get("Address"):
                    node_endpoints.append(f"{endpoint['Address']}:{endpoint.get('Port', '')}")

            records.append(
                ResourceRecord(
                    identifier=arn,
                    display_name=cluster_id,
                    kind=KIND_ELASTICACHE_CLUSTER,
                    location=region,
                    labels=parse_tags(tags_resp.get("TagList")),
                    attributes={
                        "engine": cluster.get("Engine"),
                        "engine_version": cluster.get("EngineVersion"),
                        "cache_node_type": cluster.get("CacheNodeType"),
                        "status": cluster.get("CacheClusterStatus"),
                        "num_cache_nodes": cluster.get("NumCacheNodes", 0),
                        "node_endpoints": node_endpoints,
                    },
                )
            )

    return records
