"""
tests/inventory/services/test_services_dns.py - Route 53 수집 테스트
"""

from unittest.mock import MagicMock

from conftest import create_mock_client_error

from awsinv.inventory.services.dns import collect_route53_hosted_zones, zone_resource_id
from awsinv.parallel import ErrorCollector


def _zones(count: int) -> list[dict]:
    return [
        {
            "Id": f"/hostedzone/Z{i}",
            "Name": f"zone{i}.example.com.",
            "ResourceRecordSetCount": i,
            "Config": {"PrivateZone": i % 2 == 0, "Comment": "managed"},
        }
        for i in range(count)
    ]


def _route53(zones, make_paginator) -> MagicMock:
    route53 = MagicMock()
    route53.get_paginator.return_value = make_paginator([{"HostedZones": zones}])

    def list_tags(ResourceType, ResourceIds):
        return {
            "ResourceTagSets": [
                {"ResourceType": ResourceType, "ResourceId": rid, "Tags": [{"Key": "zone", "Value": rid}]}
                for rid in ResourceIds
            ]
        }

    route53.list_tags_for_resources.side_effect = list_tags
    return route53


class TestCollectRoute53:
    """collect_route53_hosted_zones 테스트"""

    def test_zone_resource_id(self):
        assert zone_resource_id("/hostedzone/Z123") == "Z123"
        assert zone_resource_id("Z123") == "Z123"

    def test_records_are_global(self, mock_session, make_paginator):
        mock_session.client.return_value = _route53(_zones(1), make_paginator)

        record = collect_route53_hosted_zones(mock_session, "us-east-1")[0]

        assert record.identifier == "/hostedzone/Z0"
        assert record.display_name == "zone0.example.com."
        assert record.location == "global"
        assert record.kind == "route53:hostedzone"
        assert record.labels == {"zone": "Z0"}
        assert record.attributes["private_zone"] is True

    def test_tags_batched_by_10(self, mock_session, make_paginator):
        route53 = _route53(_zones(23), make_paginator)
        mock_session.client.return_value = route53

        records = collect_route53_hosted_zones(mock_session, "us-east-1")

        sizes = [len(c.kwargs["ResourceIds"]) for c in route53.list_tags_for_resources.call_args_list]
        assert sizes == [10, 10, 3]
        assert records[22].labels == {"zone": "Z22"}

    def test_tag_failure(self, mock_session, make_paginator):
        route53 = _route53(_zones(2), make_paginator)
        route53.list_tags_for_resources.side_effect = create_mock_client_error("ThrottlingException")
        mock_session.client.return_value = route53
        errors = ErrorCollector("route53")

        records = collect_route53_hosted_zones(mock_session, "us-east-1", errors)

        assert [r.labels for r in records] == [{}, {}]
        assert errors.errors[0].region == "global"
