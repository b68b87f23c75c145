"""Tests for property bag and settings validation."""

import pytest
from pydantic import ValidationError

from network_reconcilers.config import (
    ClusterCleanupProperties,
    ConfigValidationError,
    HandlerSettings,
    RoutePeeringProperties,
    drift_prefix,
    parse_properties,
)


class TestRoutePeeringProperties:
    """Tests for the peering routes property bag."""

    def test_parses_camel_case_bag(self):
        props = parse_properties(RoutePeeringProperties, {
            "ServiceToken": "arn:aws:lambda:us-east-1:123456789012:function:f",
            "vpcId": "vpc-0abc",
            "peeringConnectionId": "pcx-0def",
            "destinationCidrBlock": "10.0.0.0/16",
            "region": "eu-west-1",
        })
        assert props.vpc_id == "vpc-0abc"
        assert props.peering_connection_id == "pcx-0def"
        assert props.destination_cidr_block == "10.0.0.0/16"
        assert props.region == "eu-west-1"

    def test_region_optional(self):
        props = parse_properties(RoutePeeringProperties, {
            "vpcId": "vpc-1", "peeringConnectionId": "pcx-1", "destinationCidrBlock": "10.0.0.0/16"
        })
        assert props.region is None

    def test_cidr_normalized(self):
        props = RoutePeeringProperties(
            vpcId="vpc-1", peeringConnectionId="pcx-1", destinationCidrBlock=" 10.0.1.7/16 "
        )
        assert props.destination_cidr_block == "10.0.0.0/16"

    @pytest.mark.parametrize("cidr", ["10.0.0.0/33", "bogus", "2001:db8::/32", ""])
    def test_invalid_cidr(self, cidr):
        with pytest.raises(ValidationError):
            RoutePeeringProperties(vpcId="vpc-1", peeringConnectionId="pcx-1", destinationCidrBlock=cidr)

    def test_invalid_ids(self):
        with pytest.raises(ConfigValidationError) as exc_info:
            parse_properties(RoutePeeringProperties, {
                "vpcId": "subnet-1", "peeringConnectionId": "tgw-1", "destinationCidrBlock": "10.0.0.0/16"
            })
        locations = [error["loc"] for error in exc_info.value.errors]
        assert ["vpcId"] in locations
        assert ["peeringConnectionId"] in locations
        assert "2 error(s)" in str(exc_info.value)

    def test_missing_bag(self):
        with pytest.raises(ConfigValidationError) as exc_info:
            parse_properties(RoutePeeringProperties, None)
        assert len(exc_info.value.errors) == 3

    def test_frozen(self):
        props = RoutePeeringProperties(vpcId="vpc-1", peeringConnectionId="pcx-1", destinationCidrBlock="10.0.0.0/16")
        with pytest.raises(ValidationError):
            props.vpc_id = "vpc-2"


class TestClusterCleanupProperties:
    """Tests for the cleanup property bag."""

    def test_drift_prefix(self):
        props = ClusterCleanupProperties(vpcId="vpc-1", clusterName="prod-cluster")
        assert props.drift_prefix == "eks-cluster-sg-prod-cluster"
        assert drift_prefix("x") == "eks-cluster-sg-x"

    @pytest.mark.parametrize("name", ["", "-leading-dash", "has space", "a" * 101])
    def test_invalid_cluster_name(self, name):
        with pytest.raises(ValidationError):
            ClusterCleanupProperties(vpcId="vpc-1", clusterName=name)


class TestHandlerSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self):
        settings = HandlerSettings.from_env({})
        assert settings.log_level == "info"
        assert settings.log_format == "json"
        assert settings.ec2_max_retries == 5
        assert settings.response_timeout == 10.0

    def test_from_env(self):
        settings = HandlerSettings.from_env({
            "LOG_LEVEL": "DEBUG",
            "LOG_FORMAT": "console",
            "EC2_MAX_RETRIES": "2",
            "RESPONSE_TIMEOUT": "5",
        })
        assert settings.log_level == "debug"
        assert settings.log_format == "console"
        assert settings.ec2_max_retries == 2
        assert settings.response_timeout == 5.0

    def test_empty_values_use_defaults(self):
        assert HandlerSettings.from_env({"LOG_LEVEL": ""}).log_level == "info"

    def test_invalid(self):
        with pytest.raises(ValidationError):
            HandlerSettings.from_env({"LOG_LEVEL": "verbose"})
