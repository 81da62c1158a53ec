"""
awsinv/inventory/services - 서비스별 리소스 수집기 패키지

각 서비스 모듈은 ``collect_*(session, region, errors=None)`` 함수를 제공하며,
단일 리전에서 해당 리소스를 수집해 ResourceRecord 목록으로 반환합니다.
이 함수들은 ``ResourceCollector``에서 ``RegionExecutor``를 통해 여러 리전으로
확장됩니다. ``helpers`` 모듈은 태그 파싱, 배치 분할, IP 필터링을 제공합니다.

서비스 (8종):
    - ec2: EC2 Instance
    - elb: ALB/NLB/GWLB
    - rds / dynamodb / elasticache: Database
    - route53: Hosted Zone (글로벌)
    - s3: Bucket (글로벌 목록, 버킷별 동시 상세 조회)
    - eks: Pod (Kubernetes API)
"""

from .database import collect_dynamodb_tables, collect_elasticache_clusters, collect_rds_instances
from .dns import collect_route53_hosted_zones
from .ec2 import collect_ec2_instances
from .eks import ClusterConnector, EksClusterConnector, PodLister, collect_eks_pods
from .elb import collect_load_balancers
from .storage import RecentObjects, collect_s3_buckets

__all__ = [
    "collect_ec2_instances",
    "collect_load_balancers",
    "collect_rds_instances",
    "collect_dynamodb_tables",
    "collect_elasticache_clusters",
    "collect_route53_hosted_zones",
    "collect_s3_buckets",
    "RecentObjects",
    "collect_eks_pods",
    "ClusterConnector",
    "EksClusterConnector",
    "PodLister",
]
