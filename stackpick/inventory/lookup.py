"""
CloudFormation status lookups for declared stacks.
"""

import logging
import threading
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..errors import StackLookupError
from .models import StackRecord

logger = logging.getLogger(__name__)


def is_stack_not_found(error: ClientError) -> bool:
    """
    Check whether a DescribeStacks error means "no such stack".

    CloudFormation reports a missing stack as a ValidationError whose
    message ends in "does not exist".
    """
    details = error.response.get("Error", {})
    return details.get("Code") == "ValidationError" and "does not exist" in details.get("Message", "")


class CloudFormationLookup:
    """Looks up one stack at a time by its CloudFormation stack name."""

    def __init__(self, region: str, session: Optional[boto3.session.Session] = None, client=None):
        self.region = region
        self.session = session
        self._client = client
        self._client_lock = threading.Lock()

    def _get_client(self):
        """
        Lazy initialization of the CloudFormation client.

        Called from reconcile worker threads; the shared Session is only
        touched once, under the lock.
        """
        with self._client_lock:
            if self._client is None:
                session = self.session or boto3.session.Session()
                self._client = session.client("cloudformation", region_name=self.region)
        return self._client

    def __call__(self, backing_id: str) -> Optional[StackRecord]:
        """
        Describe a stack.

        Args:
            backing_id: CloudFormation stack name

        Returns:
            StackRecord when the stack exists, None when it does not

        Raises:
            StackLookupError: If the lookup itself failed (permissions, network, throttling)
        """
        client = self._get_client()
        logger.debug(f"Describing CloudFormation stack {backing_id} in {self.region}")

        try:
            response = client.describe_stacks(StackName=backing_id)
        except ClientError as e:
            if is_stack_not_found(e):
                logger.debug(f"Stack {backing_id} not found in {self.region}")
                return None
            raise StackLookupError(backing_id, str(e)) from e
        except BotoCoreError as e:
            raise StackLookupError(backing_id, str(e)) from e

        stacks = response.get("Stacks", [])
        if not stacks:
            return None

        stack = stacks[0]
        tags = {tag["Key"]: tag["Value"] for tag in stack.get("Tags", []) if tag.get("Key")}

        return StackRecord(
            stack_id=stack["StackId"],
            raw_status=stack.get("StackStatus", ""),
            created_at=stack.get("CreationTime"),
            updated_at=stack.get("LastUpdatedTime"),
            description=stack.get("Description"),
            tags=tags,
        )
