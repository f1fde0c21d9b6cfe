"""
Shared constants for the S3 7z Compressor project
"""

# Archive container produced by the pipeline
ARCHIVE_EXTENSION = ".7z"

# 7-Zip binary location inside the Lambda image (LAMBDA_TASK_ROOT is /var/task)
SEVEN_ZIP_PATH = "/var/task/7za"
SEVEN_ZIP_DOWNLOAD_URL = "https://www.7-zip.org/a/7z2301-linux-x64.tar.xz"

# Lambda sizing defaults
# /tmp must hold the source object and its archive at the same time
DEFAULT_MEMORY_MB = 2048
DEFAULT_EPHEMERAL_STORAGE_MB = 10240
DEFAULT_TIMEOUT_MINUTES = 15

# Result codes
RESULT_SUCCEEDED = "SUCCEEDED"
RESULT_FAILED = "FAILED"

# Invocation event fields
REQUEST_FIELDS = [
    "processId",
    "originRegion",
    "originBucket",
    "originKey",
    "targetRegion",
    "targetBucket",
    "targetKey",
    "deleteOriginal",
    "queueRegion",
    "queueAddress",
]

# Result / notification message fields
RESULT_FIELDS = ["result", "message", "processId", "region", "bucket", "key"]
