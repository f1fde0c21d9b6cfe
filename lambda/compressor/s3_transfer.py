"""
S3 transfer stage: download, upload and delete single objects

Each function takes the region-scoped client to use, so the caller decides
which region an operation runs against.
"""

import os

from botocore.exceptions import BotoCoreError, ClientError

from compression_errors import DeleteWarning, DownloadError, UploadError

BUFFER_SIZE = 4 * 1024 * 1024


def download(client, bucket: str, key: str, dest_path: str) -> int:
    """
    Stream s3://bucket/key into dest_path (created or truncated).

    Returns:
        Number of bytes written

    Raises:
        DownloadError with step 'create', 'fetch', 'read' or 'write'
    """
    try:
        f = open(dest_path, 'wb')
    except OSError as e:
        raise DownloadError('create', f"failed to create temp file {dest_path}: {e}") from e

    with f:
        try:
            response = client.get_object(Bucket=bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            raise DownloadError('fetch', f"failed to get S3 object s3://{bucket}/{key}: {e}") from e

        body = response['Body']
        bytes_written = 0
        try:
            while True:
                try:
                    chunk = body.read(BUFFER_SIZE)
                except (BotoCoreError, ClientError, OSError) as e:
                    raise DownloadError('read', f"failed to read S3 object s3://{bucket}/{key}: {e}") from e
                if not chunk:
                    break
                try:
                    f.write(chunk)
                except OSError as e:
                    raise DownloadError('write', f"failed to write temp file {dest_path}: {e}") from e
                bytes_written += len(chunk)
        finally:
            body.close()

    return bytes_written


def upload(client, bucket: str, key: str, src_path: str) -> int:
    """
    Upload src_path to s3://bucket/key, overwriting any existing object.

    Returns:
        Size of the uploaded file in bytes

    Raises:
        UploadError with step 'open', 'stat' or 'put'
    """
    try:
        f = open(src_path, 'rb')
    except OSError as e:
        raise UploadError('open', f"failed to open source file {src_path}: {e}") from e

    with f:
        try:
            file_size = os.fstat(f.fileno()).st_size
        except OSError as e:
            raise UploadError('stat', f"failed to get file info for {src_path}: {e}") from e

        try:
            client.put_object(Bucket=bucket, Key=key, Body=f, ContentLength=file_size)
        except (BotoCoreError, ClientError) as e:
            raise UploadError('put', f"failed to put S3 object s3://{bucket}/{key}: {e}") from e

    return file_size


def delete(client, bucket: str, key: str):
    try:
        client.delete_object(Bucket=bucket, Key=key)
    except (BotoCoreError, ClientError) as e:
        raise DeleteWarning(f"failed to delete S3 object s3://{bucket}/{key}: {e}") from e
