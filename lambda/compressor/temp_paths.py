"""
Temporary path derivation and per-invocation workspace

All scratch files live flat under one directory: the object key's folder
components are dropped and only its final segment is used.
"""

import os
from typing import Optional, Tuple

from compression_errors import DownloadError

ARCHIVE_EXTENSION = '.7z'
DEFAULT_TEMP_DIR = '/tmp'
FALLBACK_FILE_NAME = 'object'


def _split_extension(name: str) -> Tuple[str, str]:
    """Split a single path segment at its last dot (the dot stays with the extension)"""
    idx = name.rfind('.')
    if idx < 0:
        return name, ''
    return name[:idx], name[idx:]


def replace_extension(key: str, new_extension: str) -> str:
    """
    Replace the extension of the key's final segment, or append one if it has none.

    Only the last extension is replaced, and dots in directory components are ignored:
        replace_extension('a/b/file.txt', '.7z')    -> 'a/b/file.7z'
        replace_extension('multi.part.tar', '.7z')  -> 'multi.part.7z'
        replace_extension('a.b/noext', '.7z')       -> 'a.b/noext.7z'
    """
    head, sep, name = key.rpartition('/')
    stem, ext = _split_extension(name)
    if not ext:
        return key + new_extension
    return head + sep + stem + new_extension


def base_name(key: str) -> str:
    """Final segment of an object key, usable as a file name under the scratch directory"""
    name = key.rstrip('/').rsplit('/', 1)[-1]
    # '.' and '..' are valid key segments but name directories on disk
    if name in ('', '.', '..'):
        return FALLBACK_FILE_NAME
    return name


def derive_temp_paths(
    origin_key: str,
    temp_dir: str = DEFAULT_TEMP_DIR,
    token: Optional[str] = None
) -> Tuple[str, str]:
    """
    Compute the (input_path, output_path) pair for an object key.

    Args:
        origin_key: Source object key, e.g. 'folder/photo.png'
        temp_dir: Shared temporary directory
        token: Optional per-invocation token; when given, both files go into
            temp_dir/<token> so concurrent invocations never share paths

    Returns:
        Tuple like ('/tmp/photo.png', '/tmp/photo.7z')
    """
    scratch_dir = os.path.join(temp_dir, token) if token else temp_dir
    file_name = base_name(origin_key)
    stem, _ = _split_extension(file_name)
    input_path = os.path.join(scratch_dir, file_name)
    output_path = os.path.join(scratch_dir, stem + ARCHIVE_EXTENSION)
    return input_path, output_path


class Workspace:
    """
    Owns the input/output temp files of one invocation.

    Used as a context manager: entering prepares the scratch directory and
    clears stale files, leaving removes both files (and the private directory)
    exactly once, whatever happened in between.
    """

    def __init__(self, input_path: str, output_path: str):
        self.input_path = input_path
        self.output_path = output_path
        self.directory = os.path.dirname(input_path)
        self._created_directory = False
        self._released = False

    def __enter__(self) -> 'Workspace':
        if not os.path.isdir(self.directory):
            try:
                os.makedirs(self.directory, exist_ok=True)
            except OSError as e:
                raise DownloadError('create', f"failed to create temp directory {self.directory}: {e}") from e
            self._created_directory = True
        # 7z 'a' appends to an existing archive, so never start from leftovers
        self._remove_paths()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.release()
        return False

    def release(self):
        if self._released:
            return
        self._released = True
        self._remove_paths()
        if self._created_directory:
            try:
                os.rmdir(self.directory)
            except OSError as e:
                print(f"[WARN] Failed to remove temp directory {self.directory}: {e}")

    def _remove_paths(self):
        for path in (self.input_path, self.output_path):
            try:
                os.remove(path)
            except FileNotFoundError:
                continue
            except OSError as e:
                print(f"[WARN] Failed to delete temp file {path}: {e}")
