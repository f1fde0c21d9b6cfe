"""
7-Zip archive step

Wraps one input file into a .7z container using Copy mode (no entropy coding).
The binary ships in the container image; see Dockerfile.
"""

import os
import subprocess
from typing import List, Optional

from compression_errors import ArchiveExecutionError, ArchiveToolMissing

DEFAULT_SEVEN_ZIP_PATH = '/var/task/7za'
FORMAT_FLAG = '-t7z'
COPY_FLAG = '-m0=Copy'


class SevenZipArchiver:
    """Runs `7za a -t7z -m0=Copy [-mmtN] <output> <input>`"""

    def __init__(self, executable: str = DEFAULT_SEVEN_ZIP_PATH, threads: Optional[int] = None):
        self.executable = executable
        self.threads = threads

    def build_command(self, input_path: str, output_path: str) -> List[str]:
        command = [self.executable, 'a', FORMAT_FLAG, COPY_FLAG]
        if self.threads:
            command.append(f'-mmt{self.threads}')
        command.extend([output_path, input_path])
        return command

    def compress(self, input_path: str, output_path: str):
        """
        Create output_path containing input_path.

        Raises:
            ArchiveToolMissing: the binary is not at its configured path
            ArchiveExecutionError: spawn failure or non-zero exit (carries 7-Zip's output)
        """
        if not os.path.isfile(self.executable):
            raise ArchiveToolMissing(self.executable)

        command = self.build_command(input_path, output_path)
        # LANG=C keeps 7-Zip's diagnostics verbose and in English
        env = {**os.environ, 'LANG': 'C'}

        try:
            completed = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                env=env,
                check=False,
            )
        except OSError as e:
            raise ArchiveExecutionError(f"failed to run 7-Zip: {e}") from e

        output = completed.stdout.decode('utf-8', errors='replace') if completed.stdout else ''
        if completed.returncode != 0:
            print(f"[ERROR] 7za failed with exit status {completed.returncode}\n{output}")
            raise ArchiveExecutionError(
                f"7za error: exit status {completed.returncode}: {output.strip()}",
                output=output,
                returncode=completed.returncode,
            )

        print("7za compression successful")
