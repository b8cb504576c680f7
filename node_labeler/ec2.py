"""EC2 instance lookup."""

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from node_labeler.exceptions import (
    CloudProviderError,
    IdentifierMalformedError,
    LookupAmbiguousError,
)
from node_labeler.logging_config import get_logger
from node_labeler.models.tag import CloudTag

logger = get_logger(__name__)

PROVIDER_ID_SEGMENTS = 5


def instance_id_from_provider_id(provider_id: str) -> str:
    """Extract the EC2 instance ID from a node providerID.

    AWS provider IDs look like ``aws:///us-east-1c/i-0393ac1bb853a1fb5``.

    Raises:
        IdentifierMalformedError: If the ID does not split into five segments.
    """
    segments = (provider_id or "").split("/")
    if len(segments) != PROVIDER_ID_SEGMENTS:
        raise IdentifierMalformedError(
            f"Cannot parse providerID '{provider_id}'",
            f"Expected {PROVIDER_ID_SEGMENTS} parts after a split on '/', "
            f"got {len(segments)} (e.g. aws:///us-east-1c/i-0123456789abcdef0)",
        )
    return segments[4]


class EC2InstanceLookup:
    """Fetches EC2 instances and their tags."""

    def __init__(self, session: boto3.session.Session | None = None):
        """Initialize the lookup.

        Args:
            session: boto3 session to create clients from (default session if omitted)
        """
        self.session = session or boto3.session.Session()
        self._clients = {}

    def client(self, region: str):
        if region not in self._clients:
            self._clients[region] = self.session.client("ec2", region_name=region)
        return self._clients[region]

    def get_instance(self, region: str, instance_id: str) -> dict:
        """Describe exactly one instance.

        Raises:
            LookupAmbiguousError: If the response does not hold exactly one instance.
            CloudProviderError: If the EC2 API call fails.
        """
        logger.debug(f"Describing instance {instance_id} in {region}")

        try:
            response = self.client(region).describe_instances(InstanceIds=[instance_id])
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.error(f"DescribeInstances failed for {instance_id}: {code}")
            raise CloudProviderError(
                f"Failed to describe instance {instance_id} in {region}",
                f"EC2 returned {code}. Check the instance exists and the node's "
                "IAM role allows ec2:DescribeInstances",
            ) from e
        except BotoCoreError as e:
            logger.error(f"DescribeInstances failed for {instance_id}: {e}")
            raise CloudProviderError(
                f"Failed to describe instance {instance_id} in {region}", str(e)
            ) from e

        reservations = response.get("Reservations", [])
        if len(reservations) != 1:
            raise LookupAmbiguousError(
                f"Expected one reservation for {instance_id}, got {len(reservations)}"
            )
        instances = reservations[0].get("Instances", [])
        if len(instances) != 1:
            raise LookupAmbiguousError(
                f"Expected one instance for {instance_id}, got {len(instances)}"
            )
        return instances[0]

    def get_instance_tags(self, region: str, instance_id: str) -> list[CloudTag]:
        """Return the tags of one instance in the order EC2 lists them."""
        instance = self.get_instance(region, instance_id)
        tags = [CloudTag.from_ec2(t) for t in instance.get("Tags", [])]
        logger.debug(f"Instance {instance_id} has {len(tags)} tags")
        return tags
