"""Tests for name and address helpers."""
import pytest

from mcp_bigip.validators import cidr_to_netmask, full_path, split_full_path, validate_f5_name


class TestValidateName:
    """Tests for validate_f5_name."""

    @pytest.mark.parametrize("name", ["web-pool", "10.0.0.1", "/Common/web-pool", "/Common/app1/web"])
    def test_valid(self, name):
        assert validate_f5_name(name) == name

    @pytest.mark.parametrize("name", ["", "web pool", "/Common", "/Common//web", "Common/web"])
    def test_invalid(self, name):
        with pytest.raises(ValueError):
            validate_f5_name(name)


class TestFullPath:
    """Tests for identity helpers."""

    def test_partition_and_name(self):
        assert full_path("Common", "web") == "/Common/web"

    def test_already_full(self):
        assert full_path("Common", "/Other/web") == "/Other/web"

    def test_no_partition(self):
        assert full_path("", "bigip1.test") == "bigip1.test"

    def test_split(self):
        assert split_full_path("/Common/web") == ("Common", "web")
        assert split_full_path("/Common/app1/web") == ("Common/app1", "web")
        assert split_full_path("web") == ("", "web")


class TestNetmask:
    """Tests for cidr_to_netmask."""

    @pytest.mark.parametrize("mask,expected", [
        ("24", "255.255.255.0"),
        ("32", "255.255.255.255"),
        ("0", "0.0.0.0"),
        ("255.255.0.0", "255.255.0.0"),
        ("", ""),
    ])
    def test_expand(self, mask, expected):
        assert cidr_to_netmask(mask) == expected

    @pytest.mark.parametrize("mask", ["33", "-1", "wide"])
    def test_invalid(self, mask):
        with pytest.raises(ValueError):
            cidr_to_netmask(mask)
