# awsinv/__init__.py
"""
awsinv - AWS 리소스 인벤토리

여러 AWS 서비스와 EKS Pod를 하나의 스키마(ResourceRecord)로 정규화하여
SQLite 저장소에 멱등적으로 저장하고, 이후 필터 조회와 IP 소유자 조회를 제공합니다.

아키텍처:
    awsinv/
    ├── config.py       # 중앙 설정 관리
    ├── exceptions.py   # 통합 예외 계층
    ├── auth.py         # 프로파일 → boto3 Session, 리전 확장
    ├── parallel/       # 리전 실행기, fan-out, 에러 수집
    ├── inventory/      # ResourceRecord, IP 분류, 서비스별 수집기, 실행 루프
    ├── store/          # SQLite 저장/조회/내보내기
    └── cli/            # Click CLI

Usage:
    from awsinv.auth import AuthContext
    from awsinv.inventory import build_collectors, run_inventory
    from awsinv.store import InventoryStore, identify_ip

    with InventoryStore("aws_inventory.db") as store:
        report = run_inventory(store, AuthContext("my-profile"), build_collectors(["ec2"]), ["ap-northeast-2"])
        print(identify_ip(store, "10.0.0.1"))
"""

__version__ = "0.3.0"

__all__: list[str] = ["__version__"]
