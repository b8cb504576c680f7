"""Pytest configuration and shared fixtures."""

from unittest.mock import Mock

import pytest
from hypothesis import Verbosity, settings
from kubernetes import client

# Configure Hypothesis for property-based testing
settings.register_profile("default", max_examples=100, verbosity=Verbosity.normal)
settings.register_profile("ci", max_examples=1000, verbosity=Verbosity.verbose)
settings.register_profile("dev", max_examples=10, verbosity=Verbosity.verbose)

# Load the default profile
settings.load_profile("default")


@pytest.fixture
def make_node():
    """Factory for kubernetes V1Node objects as delivered by the API."""

    def _make_node(
        name="ip-10-0-1-23.ec2.internal",
        labels=None,
        taints=None,
        provider_id="aws:///us-east-1c/i-0393ac1bb853a1fb5",
        resource_version="1",
    ):
        if labels is None:
            labels = {"failure-domain.beta.kubernetes.io/region": "us-east-1"}
        return client.V1Node(
            metadata=client.V1ObjectMeta(
                name=name, labels=labels, resource_version=resource_version
            ),
            spec=client.V1NodeSpec(provider_id=provider_id, taints=taints),
        )

    return _make_node


@pytest.fixture
def describe_instances_response():
    """Factory for EC2 DescribeInstances responses with one instance."""

    def _response(tags, instance_id="i-0393ac1bb853a1fb5"):
        return {
            "Reservations": [
                {
                    "Instances": [
                        {
                            "InstanceId": instance_id,
                            "Tags": [{"Key": k, "Value": v} for k, v in tags],
                        }
                    ]
                }
            ]
        }

    return _response


@pytest.fixture
def ec2_client():
    """Mock EC2 client and a boto3 session returning it."""
    ec2 = Mock()
    session = Mock()
    session.client.return_value = ec2
    return ec2, session
