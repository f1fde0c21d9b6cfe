"""
Result notification to SQS
"""

import json

from botocore.exceptions import BotoCoreError, ClientError

from compression_errors import PublishError
from compression_request import CompressionResult
from region_clients import RegionClientRegistry


def publish_result(
    registry: RegionClientRegistry,
    queue_region: str,
    queue_address: str,
    result: CompressionResult
) -> bool:
    """
    Send the result as one JSON message to the configured queue.

    Returns:
        False when no queue is configured (nothing sent), True once sent

    Raises:
        PublishError if the message could not be sent
        ClientConstructionError if no SQS client can be built for the region
    """
    if not queue_address:
        return False

    client = registry.get_queue_client(queue_region)
    body = json.dumps(result.to_dict())

    try:
        client.send_message(QueueUrl=queue_address, MessageBody=body)
    except (BotoCoreError, ClientError) as e:
        raise PublishError(f"failed to send SQS message to {queue_address}: {e}") from e

    print(f"Result sent to queue: {queue_address}")
    return True
