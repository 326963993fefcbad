"""Tests for value restructurers."""

from chartmigrate.rules.restructure import advertised_ports, resources_requests_limits


class TestResourcesRequestsLimits:
    """Tests for the resources dual-write restructurer."""

    def test_dual_writes_requests_and_limits(self):
        legacy = {"cpu": {"cores": 2}, "memory": {"container": {"min": "2Gi", "max": "4Gi"}}}
        result = resources_requests_limits(legacy)
        assert result["cpu"] == {"cores": 2}
        assert result["memory"] == {"container": {"min": "2Gi", "max": "4Gi"}}
        assert result["requests"] == {"cpu": 2, "memory": "2Gi"}
        assert result["limits"] == {"cpu": 2, "memory": "4Gi"}

    def test_requests_memory_falls_back_to_max(self):
        result = resources_requests_limits({"memory": {"container": {"max": "4Gi"}}})
        assert result["requests"] == {"memory": "4Gi"}
        assert result["limits"] == {"memory": "4Gi"}

    def test_only_min_memory(self):
        result = resources_requests_limits({"memory": {"container": {"min": "1Gi"}}})
        assert result["requests"] == {"memory": "1Gi"}
        assert "limits" not in result

    def test_nothing_to_do_returns_value(self):
        value = {"custom": True}
        assert resources_requests_limits(value) == value
        assert resources_requests_limits("not a mapping") == "not a mapping"


class TestAdvertisedPorts:
    """Tests for the advertised ports dual-write restructurer."""

    def test_adds_advertised_ports(self):
        result = advertised_ports({"port": 9094, "advertisedPort": 31092})
        assert result == {"port": 9094, "advertisedPort": 31092, "advertisedPorts": [31092]}

    def test_existing_advertised_ports_kept(self):
        value = {"advertisedPort": 1, "advertisedPorts": [1, 2]}
        assert advertised_ports(value) == value

    def test_without_advertised_port(self):
        assert advertised_ports({"port": 9094}) == {"port": 9094}
