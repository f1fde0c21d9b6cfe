"""
Lambda: S3 7z Compressor

Invoked with a single S3 object reference.
- Downloads the object to /tmp
- Repackages it into a .7z container in Copy mode (no recompression)
- Uploads the archive to the target location (defaults to next to the source)
- Optionally deletes the source object
- Optionally sends the result to an SQS queue
"""

import os

from compression_errors import CompressionError, InvalidRequest
from compression_request import CompressionRequest, failed_result
from pipeline import CompressionPipeline
from region_clients import S3_SERVICE, SQS_SERVICE, RegionClientRegistry
from seven_zip import DEFAULT_SEVEN_ZIP_PATH, SevenZipArchiver
from temp_paths import DEFAULT_TEMP_DIR


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() == 'true'


def _env_int(name: str):
    value = os.environ.get(name, '').strip()
    return int(value) if value else None


# Environment variables
LAMBDA_REGION = os.environ.get('AWS_REGION', '')
DEFAULT_S3_REGION = os.environ.get('DEFAULT_S3_REGION', '') or LAMBDA_REGION
DEFAULT_SQS_REGION = os.environ.get('DEFAULT_SQS_REGION', '') or LAMBDA_REGION
SEVEN_ZIP_PATH = os.environ.get('SEVEN_ZIP_PATH', DEFAULT_SEVEN_ZIP_PATH)
SEVEN_ZIP_THREADS = _env_int('SEVEN_ZIP_THREADS')
TEMP_DIR = os.environ.get('TEMP_DIR', DEFAULT_TEMP_DIR)
NOTIFICATION_REQUIRED = _env_flag('NOTIFICATION_REQUIRED', 'true')
RAISE_ON_FAILURE = _env_flag('RAISE_ON_FAILURE', 'true')

if not os.environ.get('DEFAULT_S3_REGION'):
    print(f"[WARN] DEFAULT_S3_REGION not set, fallback to Lambda region: {LAMBDA_REGION}")
if not os.environ.get('DEFAULT_SQS_REGION'):
    print(f"[WARN] DEFAULT_SQS_REGION not set, fallback to Lambda region: {LAMBDA_REGION}")

# Initialize clients (shared by every invocation in this execution environment)
client_registry = RegionClientRegistry()
client_registry.prewarm(DEFAULT_S3_REGION, DEFAULT_SQS_REGION)

pipeline = CompressionPipeline(
    registry=client_registry,
    archiver=SevenZipArchiver(SEVEN_ZIP_PATH, threads=SEVEN_ZIP_THREADS),
    invocation_region=LAMBDA_REGION,
    temp_dir=TEMP_DIR,
    notification_required=NOTIFICATION_REQUIRED,
)

print(f"Lambda initialized - SEVEN_ZIP_PATH: {SEVEN_ZIP_PATH}, TEMP_DIR: {TEMP_DIR}")
print(f"Lambda initialized - NOTIFICATION_REQUIRED: {NOTIFICATION_REQUIRED}, RAISE_ON_FAILURE: {RAISE_ON_FAILURE}")
print(f"Lambda initialized - S3 client regions: {client_registry.cached_regions(S3_SERVICE)}, SQS client regions: {client_registry.cached_regions(SQS_SERVICE)}")


def handler(event, context):
    """
    Main handler for the Compressor Lambda

    Args:
        event: {
            "processId": "optional correlation id",
            "originRegion": "ap-northeast-2", "originBucket": "...", "originKey": "...",
            "targetRegion": "", "targetBucket": "", "targetKey": "",
            "deleteOriginal": false,
            "queueRegion": "", "queueAddress": "https://sqs..."
        }
        context: Lambda context

    Returns:
        Dict with result (SUCCEEDED or FAILED), message, processId, region, bucket, key
    """
    try:
        request = CompressionRequest.from_event(event)
    except InvalidRequest as e:
        request = CompressionRequest()
        e.result = failed_result(request, f"{e.stage} failed: {e}", LAMBDA_REGION)
        print(f"[ERROR] Invalid request: {e}")
        return _fail(e)

    print(f"Processing file: s3://{request.origin_bucket}/{request.origin_key} (processId: {request.process_id})")

    try:
        result = pipeline.run(request)
    except CompressionError as e:
        return _fail(e)

    return result.to_dict()


def _fail(error: CompressionError):
    if RAISE_ON_FAILURE:
        raise error
    return error.result.to_dict()
