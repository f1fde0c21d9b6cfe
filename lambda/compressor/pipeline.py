"""
Compression pipeline orchestrator

validate -> download -> archive -> upload -> (delete source) -> (notify)

Stages run strictly in order and the first failure short-circuits the rest.
The temp files are released exactly once on every exit path via Workspace.
Source deletion is a convenience: its failure is only a warning.
"""

import time
import uuid
from typing import Optional

import s3_transfer
from compression_errors import CompressionError, DeleteWarning, PublishError
from compression_request import (
    CompressionRequest,
    CompressionResult,
    EffectiveRequest,
    apply_defaults,
    failed_result,
    succeeded_result,
    validate_request,
)
from notifier import publish_result
from region_clients import SQS_SERVICE, RegionClientRegistry
from seven_zip import SevenZipArchiver
from temp_paths import DEFAULT_TEMP_DIR, Workspace, derive_temp_paths


class CompressionPipeline:
    """
    Runs one compression request end to end.

    Args:
        registry: Shared region client cache
        archiver: Anything with compress(input_path, output_path)
        invocation_region: Region the function runs in, the last-resort default
        temp_dir: Shared scratch directory
        notification_required: When True a failed result notification fails the
            invocation; when False it is logged and the result is kept
    """

    def __init__(
        self,
        registry: RegionClientRegistry,
        archiver: SevenZipArchiver,
        invocation_region: str,
        temp_dir: str = DEFAULT_TEMP_DIR,
        notification_required: bool = True
    ):
        self.registry = registry
        self.archiver = archiver
        self.invocation_region = invocation_region
        self.temp_dir = temp_dir
        self.notification_required = notification_required

    def run(self, request: CompressionRequest) -> CompressionResult:
        """
        Returns:
            The SUCCEEDED result

        Raises:
            CompressionError: the failing stage's error, with `.result` set to
                the FAILED result for the caller to return or publish
        """
        started = time.perf_counter()
        effective = None
        try:
            validate_request(request)
            effective = apply_defaults(request, self.invocation_region)
            result = self._process(effective)
        except CompressionError as e:
            self._record_failure(request, effective, e)
            raise

        print(f"File processing success (total time: {time.perf_counter() - started:.3f}s)")
        return result

    def _process(self, effective: EffectiveRequest) -> CompressionResult:
        input_path, output_path = derive_temp_paths(
            effective.origin_key, self.temp_dir, token=uuid.uuid4().hex
        )

        with Workspace(input_path, output_path):
            origin_client = self.registry.get_store_client(effective.origin_region)
            original_size = self._stage(
                'Download', s3_transfer.download,
                origin_client, effective.origin_bucket, effective.origin_key, input_path
            )
            print(f"Downloaded s3://{effective.origin_bucket}/{effective.origin_key}: {original_size} bytes")

            self._stage('Compression', self.archiver.compress, input_path, output_path)

            target_client = self.registry.get_store_client(effective.target_region)
            compressed_size = self._stage(
                'Upload', s3_transfer.upload,
                target_client, effective.target_bucket, effective.target_key, output_path
            )
            print(f"Uploaded s3://{effective.target_bucket}/{effective.target_key}: {compressed_size} bytes")

            if effective.delete_original:
                self._delete_original(origin_client, effective)

            result = succeeded_result(effective)
            self._notify(effective, result)
            return result

    def _stage(self, name: str, func, *args):
        started = time.perf_counter()
        try:
            value = func(*args)
        except CompressionError as e:
            print(f"[ERROR] {name} failed: {e} (duration: {time.perf_counter() - started:.3f}s)")
            raise
        print(f"{name} success (duration: {time.perf_counter() - started:.3f}s)")
        return value

    def _delete_original(self, client, effective: EffectiveRequest):
        try:
            s3_transfer.delete(client, effective.origin_bucket, effective.origin_key)
        except DeleteWarning as e:
            print(f"[WARN] Failed to delete original file: {e}")
            return
        print(f"Original file deleted: {effective.origin_bucket}/{effective.origin_key}")

    def _notify(self, effective: EffectiveRequest, result: CompressionResult):
        try:
            publish_result(self.registry, effective.queue_region, effective.queue_address, result)
        except CompressionError as e:
            if self.notification_required:
                print(f"[ERROR] Failed to send SQS message: {e}")
                raise
            print(f"[WARN] Failed to send SQS message, keeping {result.result} result: {e}")

    def _record_failure(
        self,
        request: CompressionRequest,
        effective: Optional[EffectiveRequest],
        error: CompressionError
    ):
        """Attach the FAILED result to the error and publish it best-effort"""
        if effective is not None:
            region = effective.origin_region
            queue_region, queue_address = effective.queue_region, effective.queue_address
        else:
            region = request.origin_region or self.invocation_region
            queue_region, queue_address = request.queue_region or region, request.queue_address

        error.result = failed_result(request, f"{error.stage} failed: {error}", region)
        print(f"[ERROR] {error.result.message}")

        failed_on_notify = isinstance(error, PublishError) or getattr(error, 'service', '') == SQS_SERVICE
        if not queue_address or failed_on_notify:
            return
        try:
            publish_result(self.registry, queue_region, queue_address, error.result)
        except CompressionError as e:
            print(f"[WARN] Failed to send failure notification: {e}")
