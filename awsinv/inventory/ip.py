"""
awsinv/inventory/ip.py - IP 주소 공개/사설 분류

저장 시점에 각 주소의 ``is_public`` 값을 결정합니다. 분류 기준은 아래 네트워크
목록으로 고정되어 있으며, 목록에 없는 주소는 모두 공개로 분류됩니다.
(``ipaddress``의 ``is_private``보다 좁은 기준입니다. 예: 100.64.0.0/10은 공개)
"""

from __future__ import annotations

import ipaddress
from enum import Enum

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address


class IPClass(Enum):
    """IP 주소 분류"""

    PUBLIC = "public"
    PRIVATE = "private"


_PRIVATE_V4_NETWORKS = tuple(
    ipaddress.IPv4Network(n)
    for n in (
        "10.0.0.0/8",  # RFC1918
        "172.16.0.0/12",
        "192.168.0.0/16",
        "127.0.0.0/8",  # loopback
        "169.254.0.0/16",  # link-local
        "255.255.255.255/32",  # broadcast
        "192.0.2.0/24",  # TEST-NET-1
        "198.51.100.0/24",  # TEST-NET-2
        "203.0.113.0/24",  # TEST-NET-3
        "0.0.0.0/32",  # unspecified
    )
)

_PRIVATE_V6_NETWORKS = tuple(
    ipaddress.IPv6Network(n)
    for n in (
        "::1/128",  # loopback
        "::/128",  # unspecified
        "fc00::/7",  # unique local
        "fe80::/10",  # link-local
        "2001:db8::/32",  # documentation
    )
)


def parse_ip(value: str | IPAddress) -> IPAddress:
    """문자열 또는 ipaddress 객체를 ipaddress 객체로 변환

    Raises:
        ValueError: IP 주소가 아닌 입력
    """
    if isinstance(value, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return value
    return ipaddress.ip_address(str(value).strip())


def normalize_ip(value: str | IPAddress) -> str:
    """정규화된 IP 문자열 반환 (IPv6는 축약 소문자 표기)"""
    return str(parse_ip(value))


def classify(value: str | IPAddress) -> IPClass:
    """IP 주소를 PUBLIC/PRIVATE로 분류

    Args:
        value: IP 주소 문자열 또는 ipaddress 객체

    Returns:
        IPClass

    Raises:
        ValueError: IP 주소가 아닌 입력
    """
    ip = parse_ip(value)
    networks = _PRIVATE_V4_NETWORKS if ip.version == 4 else _PRIVATE_V6_NETWORKS
    for network in networks:
        if ip in network:
            return IPClass.PRIVATE
    return IPClass.PUBLIC


def is_public(value: str | IPAddress) -> bool:
    return classify(value) is IPClass.PUBLIC
