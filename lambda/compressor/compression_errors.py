"""
Error taxonomy for the compressor Lambda

Every failure the pipeline can surface is a CompressionError subclass. The
orchestrator attaches the FAILED CompressionResult to the error it raises so
the handler can either re-raise it or return the structured result.
"""

from typing import Optional


class CompressionError(Exception):
    """Base class for all pipeline failures"""

    stage = "pipeline"

    def __init__(self, message: str):
        super().__init__(message)
        self.result = None


class InvalidRequest(CompressionError):
    stage = "validate"


class ClientConstructionError(CompressionError):
    """A region-scoped boto3 client could not be built"""

    stage = "client"

    def __init__(self, service: str, region: str, cause: Exception):
        super().__init__(f"failed to create {service} client for region '{region}': {cause}")
        self.service = service
        self.region = region


class DownloadError(CompressionError):
    """
    Download failure, with `step` naming the sub-step that failed:
    create (temp file), fetch (GetObject), read (response body) or write (temp file)
    """

    stage = "download"

    def __init__(self, step: str, message: str):
        super().__init__(message)
        self.step = step


class UploadError(CompressionError):
    """Upload failure, with `step` one of open, stat or put"""

    stage = "upload"

    def __init__(self, step: str, message: str):
        super().__init__(message)
        self.step = step


class ArchiveToolMissing(CompressionError):
    stage = "archive"

    def __init__(self, path: str):
        super().__init__(f"7-Zip binary not found at {path}")
        self.path = path


class ArchiveExecutionError(CompressionError):
    """7-Zip ran (or failed to spawn) and did not exit cleanly"""

    stage = "archive"

    def __init__(self, message: str, output: str = "", returncode: Optional[int] = None):
        super().__init__(message)
        self.output = output
        self.returncode = returncode


class DeleteWarning(CompressionError):
    """Source deletion failed. Logged only, never fails the pipeline."""

    stage = "delete"


class PublishError(CompressionError):
    stage = "notify"
