"""
awsinv/cli/console.py - Rich 콘솔 유틸리티

진행 메시지와 로그는 stderr 콘솔로, 조회 결과는 stdout으로 출력합니다.
"""

from __future__ import annotations

import logging
import platform

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from awsinv.config import LogConfig


def get_console(stderr: bool = False) -> Console:
    """Rich Console 인스턴스를 생성하고 반환합니다."""
    is_windows = platform.system().lower() == "windows"

    return Console(
        stderr=stderr,
        color_system="auto",
        highlight=False,
        soft_wrap=True,
        markup=True,
        emoji=not is_windows,
    )


# 전역 콘솔 인스턴스
console = get_console()
err_console = get_console(stderr=True)


def setup_logging(verbose: bool = False) -> LogConfig:
    """루트 로거에 RichHandler 설치 (중복 설치 방지)

    Args:
        verbose: True면 INFO 레벨

    Returns:
        적용된 LogConfig
    """
    log_config = LogConfig.from_env(verbose)
    root = logging.getLogger()
    root.setLevel(log_config.level)

    if not any(isinstance(h, RichHandler) for h in root.handlers):
        handler = RichHandler(console=err_console, rich_tracebacks=True, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        root.addHandler(handler)

    # botocore 노이즈 로그 제한
    for name in log_config.quiet_loggers:
        logging.getLogger(name).setLevel(max(log_config.level, logging.WARNING))

    return log_config


# =============================================================================
# 표준 출력 스타일
# =============================================================================

SYMBOL_SUCCESS = "✓"
SYMBOL_ERROR = "✗"
SYMBOL_WARNING = "!"
SYMBOL_INFO = "•"

INDENT = "   "


def print_success(message: str) -> None:
    err_console.print(f"[green]{SYMBOL_SUCCESS} {escape(message)}[/green]")


def print_error(message: str) -> None:
    err_console.print(f"[red]{SYMBOL_ERROR} {escape(message)}[/red]")


def print_warning(message: str) -> None:
    err_console.print(f"[yellow]{SYMBOL_WARNING} {escape(message)}[/yellow]")


def print_info(message: str) -> None:
    err_console.print(f"[blue]{SYMBOL_INFO} {escape(message)}[/blue]")


def print_header(title: str) -> None:
    """섹션 헤더 출력"""
    err_console.print()
    err_console.print(f"[bold underline cyan]{escape(title)}[/bold underline cyan]")


def print_sub_task_done(message: str) -> None:
    err_console.print(f"{INDENT}[green]{SYMBOL_SUCCESS} {escape(message)}[/green]")


def print_sub_warning(message: str) -> None:
    err_console.print(f"{INDENT}[yellow]{SYMBOL_WARNING} {escape(message)}[/yellow]")


def print_sub_error(message: str) -> None:
    err_console.print(f"{INDENT}[red]{SYMBOL_ERROR} {escape(message)}[/red]")


def print_table(
    title: str,
    columns: list[str],
    rows: list[list],
) -> None:
    """테이블 형식으로 데이터를 출력합니다.

    Args:
        title: 테이블 제목
        columns: 컬럼 헤더 리스트
        rows: 행 데이터 리스트
    """
    table = Table(title=title, show_header=True, header_style="bold magenta")

    for column in columns:
        table.add_column(column, overflow="fold")

    for row in rows:
        table.add_row(*[escape(str(cell)) for cell in row])

    console.print(table)
