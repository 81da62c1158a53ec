"""
awsinv/cli/app.py - 메인 CLI 엔트리포인트

명령어 구조:
    aws-inventory inventory [--profile P] [--regions R1,R2|all] [--services ec2,elb|--all-services]
                            [--no-eks] [--eks-clusters C1,C2] [--output DB]
    aws-inventory query [-s SERVICES] [-r REGIONS] [--text] [--inventory DB]
    aws-inventory identify IP_ADDRESS [--inventory DB]
    aws-inventory export-hosts [-o hosts.txt] [--inventory DB]

쉼표로 구분한 값과 옵션 반복(--regions a --regions b)을 모두 지원합니다.
치명적 오류(인증/설정, 저장 실패)는 메시지 출력 후 종료 코드 1로 끝납니다.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path

import click

from awsinv.auth import AuthContext
from awsinv.config import get_default_db_path, get_default_profile, get_version
from awsinv.exceptions import InventoryError, format_error_for_user
from awsinv.inventory import InventoryReport, build_collectors, run_inventory
from awsinv.inventory.ip import normalize_ip
from awsinv.store import InventoryStore, ResourceSummary, export_hosts, identify_ip, list_resources

from .console import (
    console,
    print_error,
    print_header,
    print_info,
    print_sub_error,
    print_sub_task_done,
    print_sub_warning,
    print_success,
    print_table,
    print_warning,
    setup_logging,
)

DEFAULT_SERVICES = ("ec2",)


def _split_csv(ctx: click.Context, param: click.Parameter, value: Sequence[str]) -> tuple[str, ...]:
    """multiple 옵션 값의 쉼표 분리"""
    items: list[str] = []
    for raw in value or ():
        items.extend(part.strip() for part in raw.split(",") if part.strip())
    return tuple(items)


def _validate_ip(ctx: click.Context, param: click.Parameter, value: str) -> str:
    try:
        return normalize_ip(value)
    except ValueError as e:
        raise click.BadParameter(f"올바른 IP 주소가 아닙니다: {value}") from e


def _db_path(value: str | None) -> Path:
    return Path(value).expanduser() if value else get_default_db_path()


def _open_existing(value: str | None) -> InventoryStore:
    path = _db_path(value)
    if not path.exists():
        print_error(f"인벤토리 DB가 없습니다: {path} (먼저 'inventory'를 실행하세요)")
        raise SystemExit(1)
    return InventoryStore(path)


inventory_option = click.option(
    "--inventory",
    "inventory_path",
    default=None,
    help="인벤토리 DB 경로 (기본: AWS_INVENTORY_DB 또는 ./aws_inventory.db)",
)


@click.group()
@click.version_option(version=get_version(), prog_name="aws-inventory")
def cli() -> None:
    """AWS 리소스 인벤토리 도구"""


@cli.command()
@click.option("--profile", default=None, help="AWS 프로파일 (기본: AWS_PROFILE)")
@click.option("--regions", multiple=True, callback=_split_csv, help="리전 (쉼표 구분, 'all'은 전체 리전)")
@click.option("--output", default=None, help="인벤토리 DB 경로")
@click.option("--services", multiple=True, callback=_split_csv, help="수집할 서비스 (쉼표 구분, 기본: ec2)")
@click.option("--all-services", is_flag=True, help="모든 서비스 수집")
@click.option("--no-eks", is_flag=True, help="EKS Pod 수집 제외 (--services/--all-services보다 우선)")
@click.option("--eks-clusters", multiple=True, callback=_split_csv, help="조회할 EKS 클러스터 (쉼표 구분)")
@click.option("-v", "--verbose", is_flag=True, help="상세 로그 출력")
def inventory(
    profile: str | None,
    regions: tuple[str, ...],
    output: str | None,
    services: tuple[str, ...],
    all_services: bool,
    no_eks: bool,
    eks_clusters: tuple[str, ...],
    verbose: bool,
) -> None:
    """AWS 리소스를 수집하여 인벤토리 DB에 저장"""
    setup_logging(verbose)

    db_path = _db_path(output)
    requested = ("all",) if all_services else (services or DEFAULT_SERVICES)
    auth = AuthContext(profile or get_default_profile())

    try:
        target_regions = auth.resolve_regions(regions)
        collectors = build_collectors(requested, eks_clusters=eks_clusters, skip_eks=no_eks)
        if not collectors:
            print_warning("수집할 서비스가 없습니다")
            return

        print_info(f"인벤토리 DB: {db_path}")
        print_info(f"수집 대상: {', '.join(c.service for c in collectors)}")
        print_info(f"리전: {', '.join(target_regions)}")

        with InventoryStore(db_path) as store:
            print_header("인벤토리 수집")
            report = run_inventory(
                store,
                auth,
                collectors,
                target_regions,
                on_progress=lambda service, message: print_sub_task_done(f"[{service}] {message}"),
            )
    except InventoryError as e:
        print_error(format_error_for_user(e))
        raise SystemExit(1) from e

    _print_report(report)
    print_success(f"총 {report.total_persisted}개 리소스 저장 ({db_path})")


def _print_report(report: InventoryReport) -> None:
    if not report.has_problems:
        return

    print_header("부분 실패")
    for error in report.failed_units:
        print_sub_error(str(error))
    for warning in report.warnings:
        print_sub_warning(f"{warning} - {warning.error_message}")


@cli.command()
@inventory_option
@click.option("-s", "--services", multiple=True, callback=_split_csv, help="서비스 필터 (별칭 또는 kind)")
@click.option("-r", "--regions", multiple=True, callback=_split_csv, help="리전 필터")
@click.option("--text", is_flag=True, help="JSON 대신 표 형식으로 출력")
def query(inventory_path: str | None, services: tuple[str, ...], regions: tuple[str, ...], text: bool) -> None:
    """인벤토리 조회 (서비스/리전 필터)"""
    setup_logging()

    with _open_existing(inventory_path) as store:
        results = list_resources(store, services=services, regions=regions)

    if text:
        _print_text(results)
    else:
        click.echo(json.dumps([r.to_dict() for r in results], indent=2, ensure_ascii=False, default=str))


def _print_text(results: list[ResourceSummary]) -> None:
    if not results:
        console.print("조건에 맞는 리소스가 없습니다.")
        return

    grouped: dict[tuple[str, str], list[ResourceSummary]] = {}
    for r in results:
        grouped.setdefault((r.kind, r.location), []).append(r)

    for (kind, location), items in grouped.items():
        print_table(
            f"{kind} ({location})",
            ["Name", "ARN/ID", "IPs"],
            [[r.name, r.identifier, ", ".join(r.addresses)] for r in items],
        )


@cli.command()
@inventory_option
@click.argument("ip_address", callback=_validate_ip)
def identify(inventory_path: str | None, ip_address: str) -> None:
    """IP 주소의 소유 리소스 조회"""
    setup_logging()

    with _open_existing(inventory_path) as store:
        found = identify_ip(store, ip_address)

    if found is None:
        click.echo("IP address not found in inventory.")
        return
    click.echo(found.describe(ip_address))


@cli.command("export-hosts")
@inventory_option
@click.option("-o", "--output", default="hosts.txt", show_default=True, help="출력 파일 경로")
def export_hosts_cmd(inventory_path: str | None, output: str) -> None:
    """저장된 IP 주소를 hosts 형식 파일로 내보내기"""
    setup_logging()

    with _open_existing(inventory_path) as store:
        count = export_hosts(store, output)

    print_success(f"hosts 파일 내보내기 완료: {output} ({count}줄)")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
