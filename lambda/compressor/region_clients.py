"""
Region-scoped boto3 client cache

S3 and SQS clients are bound to a region, so the pipeline keeps one client per
(service, region) for the lifetime of the Lambda execution environment. A warm
environment may serve overlapping invocations, so lookups and inserts happen
under a lock.
"""

import threading
from typing import Any, Callable, Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from compression_errors import ClientConstructionError

S3_SERVICE = 's3'
SQS_SERVICE = 'sqs'


def create_client(service: str, region: str):
    """Build a client on its own session (the default boto3 session is not thread-safe)"""
    session = boto3.session.Session()
    return session.client(service, region_name=region)


class RegionClientRegistry:
    """
    Lazily-built, cached S3/SQS clients keyed by region.

    At most one client exists per service and region. A failed construction
    is never cached: the next request for that region tries again.
    """

    def __init__(self, client_factory: Optional[Callable[[str, str], Any]] = None):
        self._client_factory = client_factory or create_client
        self._clients: Dict[str, Dict[str, Any]] = {S3_SERVICE: {}, SQS_SERVICE: {}}
        self._lock = threading.Lock()

    def get_store_client(self, region: str):
        return self._get_client(S3_SERVICE, region)

    def get_queue_client(self, region: str):
        return self._get_client(SQS_SERVICE, region)

    def prewarm(self, s3_region: str = '', sqs_region: str = ''):
        """Build the default clients up front, as a cold start would"""
        if s3_region:
            self.get_store_client(s3_region)
        if sqs_region:
            self.get_queue_client(sqs_region)

    def cached_regions(self, service: str) -> list:
        with self._lock:
            return sorted(self._clients[service])

    def _get_client(self, service: str, region: str):
        if not region:
            raise ClientConstructionError(service, region, ValueError("region is empty"))

        clients = self._clients[service]
        with self._lock:
            client = clients.get(region)
            if client is not None:
                return client

            try:
                client = self._client_factory(service, region)
            except (BotoCoreError, ClientError, ValueError) as e:
                print(f"[ERROR] Failed to create {service} client for region {region}: {e}")
                raise ClientConstructionError(service, region, e) from e

            clients[region] = client
            print(f"Created {service} client for region: {region}")
            return client
