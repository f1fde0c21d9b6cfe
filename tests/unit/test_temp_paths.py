"""
Unit tests for temp path derivation and the per-invocation workspace
"""

import pytest
import sys
import os
from unittest.mock import patch

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../../lambda/compressor'))

import temp_paths
from compression_errors import DownloadError
from temp_paths import Workspace, derive_temp_paths, replace_extension


class TestReplaceExtension:
    """Tests for replace_extension"""

    def test_replaces_extension_keeping_folders(self):
        assert replace_extension('a/b/file.txt', '.7z') == 'a/b/file.7z'

    def test_appends_when_no_extension(self):
        assert replace_extension('noext', '.7z') == 'noext.7z'

    def test_only_last_extension_replaced(self):
        assert replace_extension('multi.part.tar', '.7z') == 'multi.part.7z'

    def test_dots_in_folders_ignored(self):
        """A dot in a folder name is not an extension"""
        assert replace_extension('a.b/file', '.7z') == 'a.b/file.7z'

    def test_segment_that_is_only_an_extension(self):
        assert replace_extension('.env', '.7z') == '.7z'
        assert replace_extension('dir/.env', '.7z') == 'dir/.7z'

    def test_trailing_dot(self):
        assert replace_extension('file.', '.7z') == 'file.7z'


class TestDeriveTempPaths:
    """Tests for derive_temp_paths"""

    def test_discards_folder_components(self):
        input_path, output_path = derive_temp_paths('folder/photo.png')

        assert input_path.endswith('photo.png')
        assert output_path.endswith('photo.7z')
        assert input_path == os.path.join('/tmp', 'photo.png')
        assert output_path == os.path.join('/tmp', 'photo.7z')
        assert 'folder' not in input_path

    def test_same_paths_without_prefix(self):
        assert derive_temp_paths('folder/photo.png') == derive_temp_paths('photo.png')

    def test_custom_temp_dir(self, tmp_path):
        input_path, output_path = derive_temp_paths('x/y/data.csv', str(tmp_path))

        assert input_path == str(tmp_path / 'data.csv')
        assert output_path == str(tmp_path / 'data.7z')

    def test_token_gives_private_directory(self):
        """Two invocations on the same basename never share paths"""
        first = derive_temp_paths('a/photo.png', '/tmp', token='one')
        second = derive_temp_paths('b/photo.png', '/tmp', token='two')

        assert first[0] == '/tmp/one/photo.png'
        assert first[1] == '/tmp/one/photo.7z'
        assert first != second
        assert all(path.startswith('/tmp/') for path in first + second)

    def test_multiple_dots(self):
        input_path, output_path = derive_temp_paths('logs/app.2024.log')

        assert input_path.endswith('app.2024.log')
        assert output_path.endswith('app.2024.7z')

    def test_no_extension(self):
        input_path, output_path = derive_temp_paths('bin/blob')

        assert input_path.endswith('/blob')
        assert output_path.endswith('/blob.7z')

    def test_trailing_slash_uses_last_segment(self):
        input_path, _ = derive_temp_paths('folder/sub/')
        assert input_path == '/tmp/sub'

    def test_empty_segment_falls_back(self):
        input_path, output_path = derive_temp_paths('/')

        assert input_path == '/tmp/object'
        assert output_path == '/tmp/object.7z'

    @pytest.mark.parametrize('key', ['a/..', 'a/.', '..', './'])
    def test_dot_segments_fall_back(self, key):
        """Keys ending in '.' or '..' must still map to files inside the scratch directory"""
        input_path, output_path = derive_temp_paths(key, '/tmp', token='tok')

        assert input_path == '/tmp/tok/object'
        assert output_path == '/tmp/tok/object.7z'
        for path in (input_path, output_path):
            assert os.path.dirname(os.path.normpath(path)) == '/tmp/tok'


class TestWorkspace:
    """Tests for Workspace cleanup guarantees"""

    def test_removes_files_and_directory_on_exit(self, tmp_path):
        input_path, output_path = derive_temp_paths('k/file.bin', str(tmp_path), token='tok')

        with Workspace(input_path, output_path) as workspace:
            assert os.path.isdir(workspace.directory)
            for path in (input_path, output_path):
                with open(path, 'wb') as f:
                    f.write(b'data')

        assert not os.path.exists(input_path)
        assert not os.path.exists(output_path)
        assert list(tmp_path.iterdir()) == []

    def test_cleanup_runs_on_exception(self, tmp_path):
        input_path, output_path = derive_temp_paths('file.bin', str(tmp_path), token='tok')

        with pytest.raises(RuntimeError):
            with Workspace(input_path, output_path):
                with open(input_path, 'wb') as f:
                    f.write(b'data')
                raise RuntimeError("stage failed")

        assert list(tmp_path.iterdir()) == []

    def test_missing_files_are_fine(self, tmp_path):
        """Cleanup when a stage failed before creating either file"""
        input_path, output_path = derive_temp_paths('file.bin', str(tmp_path), token='tok')

        with Workspace(input_path, output_path):
            pass

        assert list(tmp_path.iterdir()) == []

    def test_release_runs_once(self, tmp_path):
        input_path, output_path = derive_temp_paths('file.bin', str(tmp_path), token='tok')
        workspace = Workspace(input_path, output_path)

        with patch.object(workspace, '_remove_paths', wraps=workspace._remove_paths) as remove:
            with workspace:
                workspace.release()
            assert remove.call_count == 2  # once on enter, once on release

    def test_stale_files_removed_on_enter(self, tmp_path):
        """7z appends to an existing archive, so leftovers must go first"""
        input_path, output_path = derive_temp_paths('file.bin', str(tmp_path))
        with open(output_path, 'wb') as f:
            f.write(b'stale archive')

        with Workspace(input_path, output_path):
            assert not os.path.exists(output_path)

    def test_shared_directory_is_kept(self, tmp_path):
        """Without a token the shared temp dir itself must not be removed"""
        input_path, output_path = derive_temp_paths('file.bin', str(tmp_path))

        with Workspace(input_path, output_path):
            pass

        assert tmp_path.is_dir()

    def test_removal_failure_is_logged_not_raised(self, tmp_path, capsys):
        input_path, output_path = derive_temp_paths('file.bin', str(tmp_path), token='tok')

        with patch.object(temp_paths.os, 'remove', side_effect=PermissionError("denied")):
            with Workspace(input_path, output_path):
                pass

        assert '[WARN] Failed to delete temp file' in capsys.readouterr().out

    def test_directory_creation_failure(self, tmp_path):
        blocker = tmp_path / 'blocker'
        blocker.write_bytes(b'')
        input_path, output_path = derive_temp_paths('file.bin', str(blocker), token='tok')

        with pytest.raises(DownloadError) as excinfo:
            with Workspace(input_path, output_path):
                pass

        assert excinfo.value.step == 'create'


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
