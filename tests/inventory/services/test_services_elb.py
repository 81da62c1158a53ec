"""
tests/inventory/services/test_services_elb.py - ELBv2 수집 테스트
"""

from unittest.mock import MagicMock

from conftest import create_mock_client_error

from awsinv.inventory.services.elb import collect_load_balancers
from awsinv.parallel import ErrorCollector


def _lb(index: int, **overrides) -> dict:
    lb = {
        "LoadBalancerArn": f"arn:aws:elasticloadbalancing:us-east-1:123:loadbalancer/net/lb-{index}/abc",
        "LoadBalancerName": f"lb-{index}",
        "DNSName": f"lb-{index}.elb.amazonaws.com",
        "Type": "network",
        "Scheme": "internet-facing",
        "VpcId": "vpc-1",
        "State": {"Code": "active"},
        "AvailabilityZones": [],
    }
    lb.update(overrides)
    return lb


def _elbv2(pages, make_paginator) -> MagicMock:
    elbv2 = MagicMock()
    elbv2.get_paginator.return_value = make_paginator(pages)

    def describe_tags(ResourceArns):
        return {
            "TagDescriptions": [
                {"ResourceArn": arn, "Tags": [{"Key": "owner", "Value": arn.split("/")[-2]}]} for arn in ResourceArns
            ]
        }

    elbv2.describe_tags.side_effect = describe_tags
    return elbv2


class TestCollectLoadBalancers:
    """collect_load_balancers 테스트"""

    def test_addresses_and_tags(self, mock_session, make_paginator):
        lb = _lb(
            1,
            AvailabilityZones=[
                {
                    "LoadBalancerAddresses": [
                        {"IpAddress": "52.1.2.3", "PrivateIPv4Address": "10.0.1.5"},
                        {"IPv6Address": "2600:1f18::10"},
                    ]
                },
                {"LoadBalancerAddresses": []},
            ],
        )
        mock_session.client.return_value = _elbv2([{"LoadBalancers": [lb]}], make_paginator)

        record = collect_load_balancers(mock_session, "us-east-1")[0]

        assert record.kind == "elbv2:loadbalancer"
        assert record.display_name == "lb-1"
        assert record.network_addresses == ["52.1.2.3", "10.0.1.5", "2600:1f18::10"]
        assert record.labels == {"owner": "lb-1"}
        assert record.attributes["dns_name"] == "lb-1.elb.amazonaws.com"
        assert record.attributes["state"] == "active"

    def test_tags_batched_by_20(self, mock_session, make_paginator):
        elbv2 = _elbv2([{"LoadBalancers": [_lb(i) for i in range(25)]}], make_paginator)
        mock_session.client.return_value = elbv2

        records = collect_load_balancers(mock_session, "us-east-1")

        assert len(records) == 25
        batch_sizes = [len(c.kwargs["ResourceArns"]) for c in elbv2.describe_tags.call_args_list]
        assert batch_sizes == [20, 5]
        assert records[24].labels == {"owner": "lb-24"}

    def test_failed_tag_batch_keeps_records(self, mock_session, make_paginator):
        """태그 배치 실패 시 레코드는 빈 태그로 저장되고 경고 기록"""
        elbv2 = _elbv2([{"LoadBalancers": [_lb(i) for i in range(25)]}], make_paginator)
        original = elbv2.describe_tags.side_effect

        def flaky(ResourceArns):
            if len(ResourceArns) == 20:
                raise create_mock_client_error("AccessDenied")
            return original(ResourceArns)

        elbv2.describe_tags.side_effect = flaky
        mock_session.client.return_value = elbv2
        errors = ErrorCollector("elb")

        records = collect_load_balancers(mock_session, "us-east-1", errors)

        assert len(records) == 25
        assert records[0].labels == {}
        assert records[24].labels == {"owner": "lb-24"}
        assert len(errors.warning_errors) == 1
        assert errors.errors[0].operation == "describe_tags"

    def test_empty_region(self, mock_session, make_paginator):
        elbv2 = _elbv2([{"LoadBalancers": []}], make_paginator)
        mock_session.client.return_value = elbv2

        assert collect_load_balancers(mock_session, "us-east-1") == []
        elbv2.describe_tags.assert_not_called()

    def test_skips_missing_arn(self, mock_session, make_paginator):
        mock_session.client.return_value = _elbv2([{"LoadBalancers": [_lb(1, LoadBalancerArn=None)]}], make_paginator)
        assert collect_load_balancers(mock_session, "us-east-1") == []
