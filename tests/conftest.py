"""Pytest configuration and fixtures."""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from fakes import FakeEC2Client, igw_route, nat_gateway_route, route_table
from network_reconcilers.config.models import HandlerSettings
from network_reconcilers.network.ec2 import EC2NetworkService
from network_reconcilers.utils.retry import RetryStrategy


@pytest.fixture
def no_retry():
    """Retry strategy that never sleeps or retries."""
    return RetryStrategy(max_retries=0, sleep=lambda _: None)


@pytest.fixture
def fake_ec2():
    """VPC with a main, a public, a private and an isolated route table."""
    return FakeEC2Client(
        route_tables=[
            route_table("rtb-main", routes=[igw_route()], main=True),
            route_table("rtb-public", routes=[igw_route()], subnet_id="subnet-a"),
            route_table("rtb-private", routes=[nat_gateway_route()], subnet_id="subnet-b"),
            route_table("rtb-isolated", subnet_id="subnet-c"),
            route_table("rtb-other-vpc", vpc_id="vpc-2", routes=[igw_route()]),
        ]
    )


@pytest.fixture
def service(fake_ec2, no_retry):
    """EC2 service over the fake client."""
    return EC2NetworkService(fake_ec2, no_retry)


@pytest.fixture
def settings():
    return HandlerSettings(log_level="debug", log_format="console", ec2_max_retries=0)


@pytest.fixture
def lambda_context():
    """Minimal Lambda context object."""
    return SimpleNamespace(
        log_stream_name="2026/10/19/[$LATEST]abcdef",
        function_name="reconciler",
        aws_request_id="lambda-req-1",
    )


@pytest.fixture
def mock_put():
    """Patch the HTTP PUT used to answer CloudFormation."""
    with patch("network_reconcilers.handlers.lifecycle.requests.put") as put:
        put.return_value = MagicMock(status_code=200)
        yield put


def make_event(request_type, properties, physical_resource_id=None):
    """Custom resource request event."""
    event = {
        "RequestType": request_type,
        "ResponseURL": "https://cloudformation-custom-resource-response.example.com/signed",
        "StackId": "arn:aws:cloudformation:us-east-1:123456789012:stack/network/guid",
        "RequestId": "req-1234",
        "ResourceType": "Custom::Reconciler",
        "LogicalResourceId": "Reconciler",
        "ResourceProperties": dict(properties, ServiceToken="arn:aws:lambda:us-east-1:123456789012:function:f"),
    }
    if physical_resource_id:
        event["PhysicalResourceId"] = physical_resource_id
    return event


@pytest.fixture
def event_factory():
    return make_event
