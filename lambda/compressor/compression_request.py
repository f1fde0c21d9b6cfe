"""
Request and result model for the compressor Lambda

The raw event is parsed into a CompressionRequest, validated, then resolved
once into an EffectiveRequest. Downstream stages only ever see the
EffectiveRequest, never the optional raw fields.
"""

from dataclasses import dataclass
from typing import Any, Dict

from compression_errors import InvalidRequest
from temp_paths import ARCHIVE_EXTENSION, replace_extension

RESULT_SUCCEEDED = 'SUCCEEDED'
RESULT_FAILED = 'FAILED'

TRUE_STRINGS = ('true', '1', 'yes')


def _text(event: Dict[str, Any], *names: str) -> str:
    for name in names:
        value = event.get(name)
        if value is not None:
            return str(value)
    return ''


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in TRUE_STRINGS
    return bool(value)


@dataclass(frozen=True)
class CompressionRequest:
    """Invocation input exactly as received"""

    process_id: str = ''
    origin_region: str = ''
    origin_bucket: str = ''
    origin_key: str = ''
    target_region: str = ''
    target_bucket: str = ''
    target_key: str = ''
    delete_original: bool = False
    queue_region: str = ''
    queue_address: str = ''

    @classmethod
    def from_event(cls, event: Any) -> 'CompressionRequest':
        """
        Build a request from the Lambda event.

        Accepts the older field names processUuid and queueUrl as aliases.
        """
        if not isinstance(event, dict):
            raise InvalidRequest(f"event must be a JSON object, got {type(event).__name__}")

        return cls(
            process_id=_text(event, 'processId', 'processUuid'),
            origin_region=_text(event, 'originRegion'),
            origin_bucket=_text(event, 'originBucket'),
            origin_key=_text(event, 'originKey'),
            target_region=_text(event, 'targetRegion'),
            target_bucket=_text(event, 'targetBucket'),
            target_key=_text(event, 'targetKey'),
            delete_original=_flag(event.get('deleteOriginal', False)),
            queue_region=_text(event, 'queueRegion'),
            queue_address=_text(event, 'queueAddress', 'queueUrl'),
        )


@dataclass(frozen=True)
class EffectiveRequest:
    """Request with every optional coordinate resolved"""

    process_id: str
    origin_region: str
    origin_bucket: str
    origin_key: str
    target_region: str
    target_bucket: str
    target_key: str
    delete_original: bool
    queue_region: str
    queue_address: str


@dataclass(frozen=True)
class CompressionResult:
    result: str
    message: str
    process_id: str
    region: str
    bucket: str
    key: str

    def to_dict(self) -> Dict[str, str]:
        return {
            'result': self.result,
            'message': self.message,
            'processId': self.process_id,
            'region': self.region,
            'bucket': self.bucket,
            'key': self.key,
        }


def validate_request(request: CompressionRequest):
    """Raise InvalidRequest unless the request can be processed"""
    if not request.origin_bucket or not request.origin_key:
        raise InvalidRequest("origin bucket and key required")
    # Compressing our own output would loop forever on S3-triggered setups
    if request.origin_key.endswith(ARCHIVE_EXTENSION):
        raise InvalidRequest(f"file is already compressed: {request.origin_key}")


def apply_defaults(request: CompressionRequest, invocation_region: str) -> EffectiveRequest:
    origin_region = request.origin_region or invocation_region
    queue_region = request.queue_region
    if request.queue_address and not queue_region:
        queue_region = origin_region

    return EffectiveRequest(
        process_id=request.process_id,
        origin_region=origin_region,
        origin_bucket=request.origin_bucket,
        origin_key=request.origin_key,
        target_region=request.target_region or origin_region,
        target_bucket=request.target_bucket or request.origin_bucket,
        target_key=request.target_key or replace_extension(request.origin_key, ARCHIVE_EXTENSION),
        delete_original=request.delete_original,
        queue_region=queue_region,
        queue_address=request.queue_address,
    )


def succeeded_result(effective: EffectiveRequest) -> CompressionResult:
    return CompressionResult(
        result=RESULT_SUCCEEDED,
        message="Compression succeeded",
        process_id=effective.process_id,
        region=effective.target_region,
        bucket=effective.target_bucket,
        key=effective.target_key,
    )


def failed_result(request: CompressionRequest, message: str, region: str = '') -> CompressionResult:
    """FAILED result pointing back at the origin object"""
    return CompressionResult(
        result=RESULT_FAILED,
        message=message or "compression failed",
        process_id=request.process_id,
        region=region or request.origin_region,
        bucket=request.origin_bucket,
        key=request.origin_key,
    )
