"""
awsinv/inventory/services/eks.py - EKS Pod 수집

클러스터마다 describe_cluster로 엔드포인트/CA를 얻고, ``aws eks get-token``을
exec 인증으로 사용하는 kubeconfig를 만들어 Kubernetes API에서 Pod 목록을 조회합니다.

실패 정책:
- 클러스터 없음(ClusterNotFoundError): INFO 로그 후 스킵
- 연결/인증/목록 조회 실패: 경고 후 해당 클러스터만 스킵
- AWS 자격 증명 실패: 전파 (수집기 전체 중단)
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from typing import Any, Protocol

from awsinv.config import settings
from awsinv.exceptions import ClusterConnectError, ClusterError, ClusterNotFoundError, is_auth_failure, is_not_found
from awsinv.parallel import ErrorCollector, ErrorSeverity, get_client

from ..types import KIND_EKS_POD, ResourceRecord
from .helpers import valid_addresses

logger = logging.getLogger(__name__)


class PodLister(Protocol):
    """클러스터 하나의 Pod 목록 조회 핸들"""

    def iter_pods(self) -> Iterator[Any]: ...

    def close(self) -> None: ...


class ClusterConnector(Protocol):
    """클러스터 이름으로 PodLister를 만드는 연결자

    Raises:
        ClusterNotFoundError: 클러스터가 리전에 없음
        ClusterConnectError: 엔드포인트/인증/클라이언트 생성 실패
    """

    def connect(self, session, region: str, cluster: str, profile: str | None = None) -> PodLister: ...


def build_kubeconfig(
    cluster: str,
    region: str,
    endpoint: str,
    ca_data: str,
    profile: str | None = None,
) -> dict[str, Any]:
    """exec 인증(aws eks get-token) kubeconfig 딕셔너리 생성"""
    args = ["eks", "get-token", "--cluster-name", cluster, "--region", region]
    if profile:
        args += ["--profile", profile]

    return {
        "apiVersion": "v1",
        "kind": "Config",
        "clusters": [
            {
                "name": cluster,
                "cluster": {"server": endpoint, "certificate-authority-data": ca_data},
            }
        ],
        "users": [
            {
                "name": "eks-auth",
                "user": {
                    "exec": {
                        "apiVersion": settings.EKS_AUTH_API_VERSION,
                        "command": "aws",
                        "args": args,
                    }
                },
            }
        ],
        "contexts": [{"name": "eks-context", "context": {"cluster": cluster, "user": "eks-auth"}}],
        "current-context": "eks-context",
    }


class KubernetesPodLister:
    """kubernetes ApiClient 기반 Pod 목록 조회 (limit/_continue 페이지네이션)"""

    def __init__(self, api_client, page_size: int = settings.EKS_POD_PAGE_SIZE):
        self.api_client = api_client
        self.page_size = page_size

    def iter_pods(self) -> Iterator[Any]:
        from kubernetes import client as k8s_client

        v1 = k8s_client.CoreV1Api(self.api_client)
        continue_token = None
        while True:
            kwargs: dict[str, Any] = {"limit": self.page_size}
            if continue_token:
                kwargs["_continue"] = continue_token
            pod_list = v1.list_pod_for_all_namespaces(**kwargs)
            yield from pod_list.items or []

            continue_token = getattr(pod_list.metadata, "_continue", None)
            if not continue_token:
                return

    def close(self) -> None:
        self.api_client.close()


class EksClusterConnector:
    """describe_cluster + kubeconfig로 클러스터에 연결"""

    def connect(self, session, region: str, cluster: str, profile: str | None = None) -> PodLister:
        eks = get_client(session, "eks", region_name=region)
        try:
            desc = eks.describe_cluster(name=cluster).get("cluster", {})
        except Exception as e:
            if is_auth_failure(e):
                raise
            if is_not_found(e):
                raise ClusterNotFoundError(cluster, region, cause=e) from e
            raise ClusterConnectError(cluster, region, "describe_cluster failed", cause=e) from e

        endpoint = desc.get("endpoint")
        ca_data = (desc.get("certificateAuthority") or {}).get("data")
        if not endpoint:
            raise ClusterConnectError(cluster, region, "no endpoint")
        if not ca_data:
            raise ClusterConnectError(cluster, region, "no certificate authority data")

        from kubernetes import config as k8s_config

        kubeconfig = build_kubeconfig(cluster, region, endpoint, ca_data, profile)
        try:
            api_client = k8s_config.new_client_from_config_dict(kubeconfig)
        except Exception as e:
            raise ClusterConnectError(cluster, region, "kubernetes client 생성 실패 (aws CLI 경로/인증 확인)", cause=e) from e

        return KubernetesPodLister(api_client)


def discover_clusters(session, region: str) -> list[str]:
    """리전의 EKS 클러스터 이름 목록"""
    eks = get_client(session, "eks", region_name=region)
    clusters: list[str] = []
    paginator = eks.get_paginator("list_clusters")
    for page in paginator.paginate():
        clusters.extend(page.get("clusters", []))
    return clusters


def pod_record(pod: Any, region: str, cluster: str) -> ResourceRecord | None:
    """Pod 객체를 ResourceRecord로 변환 (IP가 없으면 None)"""
    metadata = pod.metadata
    status = pod.status
    name = getattr(metadata, "name", None)
    namespace = getattr(metadata, "namespace", None) or "default"
    if not name or status is None:
        return None

    candidates = [getattr(status, "pod_ip", None)]
    candidates += [getattr(p, "ip", None) for p in (getattr(status, "pod_ips", None) or [])]
    identifier = f"{region}/{cluster}/{namespace}/{name}"
    addresses = valid_addresses(candidates, identifier)
    if not addresses:
        return None

    spec = getattr(pod, "spec", None)
    return ResourceRecord(
        identifier=identifier,
        display_name=name,
        kind=KIND_EKS_POD,
        location=region,
        network_addresses=addresses,
        labels=dict(getattr(metadata, "labels", None) or {}),
        attributes={
            "cluster": cluster,
            "namespace": namespace,
            "node_name": getattr(spec, "node_name", None),
            "phase": getattr(status, "phase", None),
        },
    )


def collect_eks_pods(
    session,
    region: str,
    errors: ErrorCollector | None = None,
    clusters: Sequence[str] = (),
    connector: ClusterConnector | None = None,
    profile: str | None = None,
) -> list[ResourceRecord]:
    """EKS Pod 리소스를 수집합니다.

    clusters가 비어 있으면 리전의 클러스터를 모두 조회합니다. 클러스터 단위 실패는
    해당 클러스터만 건너뜁니다.

    Args:
        session: boto3 Session 객체
        region: AWS 리전 코드
        errors: 클러스터 단위 실패를 기록할 수집기
        clusters: 조회할 클러스터 이름 (비어 있으면 전체)
        connector: 클러스터 연결자 (None이면 EksClusterConnector)
        profile: kubeconfig exec 인증에 넘길 AWS 프로파일

    Returns:
        IP가 할당된 Pod의 ResourceRecord 목록
    """
    connector = connector or EksClusterConnector()
    targets = list(clusters) if clusters else discover_clusters(session, region)
    logger.info("[%s] EKS 클러스터 %d개 조회", region, len(targets))

    records: list[ResourceRecord] = []
    for cluster in targets:
        try:
            lister = connector.connect(session, region, cluster, profile)
        except ClusterNotFoundError as e:
            _report(errors, e, region, "describe_cluster", ErrorSeverity.INFO, cluster)
            continue
        except ClusterError as e:
            _report(errors, e, region, "connect", ErrorSeverity.WARNING, cluster)
            continue

        cluster_records: list[ResourceRecord] = []
        try:
            for pod in lister.iter_pods():
                record = pod_record(pod, region, cluster)
                if record is None:
                    logger.debug("IP 없는 Pod 제외 [%s/%s]", cluster, getattr(pod.metadata, "name", "?"))
                    continue
                cluster_records.append(record)
        except Exception as e:
            _report(errors, e, region, "list_pods", ErrorSeverity.WARNING, cluster)
            continue
        finally:
            lister.close()

        logger.info("[%s] 클러스터 '%s': Pod %d개", region, cluster, len(cluster_records))
        records.extend(cluster_records)

    return records


def _report(
    errors: ErrorCollector | None,
    error: Exception,
    region: str,
    operation: str,
    severity: ErrorSeverity,
    cluster: str,
) -> None:
    if errors is not None:
        errors.collect(error, region, operation, severity, cluster)
    elif severity is ErrorSeverity.INFO:
        logger.info("[%s] 클러스터 '%s' 스킵: %s", region, cluster, error)
    else:
        logger.warning("[%s] 클러스터 '%s' 스킵: %s", region, cluster, error)
