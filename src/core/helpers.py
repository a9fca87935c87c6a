# Copyright 2026 Pramod Kumar Voola
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

# -----------------------------------------------------------------------------
# TRANSPORT HELPERS - KEY MATERIAL & COMMAND SPLITTING
# -----------------------------------------------------------------------------
# Passed explicitly into Connection/DokkenTransport so tests can swap key
# material and the scratch directory.
# -----------------------------------------------------------------------------

import os
import shlex
import tempfile
from pathlib import Path

from rich.console import Console

from src.core.config import ConfigurationError

console = Console()

KEY_DIR_NAME = "dokken"
KEY_FILE_NAME = "id_rsa"


class TransportHelpers:
    """Key material and shell-word splitting used by a Connection."""

    def __init__(self, ssh_key_path: str | None = None, tmpdir: Path | None = None) -> None:
        self._ssh_key_path = ssh_key_path
        self._tmpdir = tmpdir

    def private_key(self) -> str:
        """
        Read the private key used for uploads.

        Raises:
            ConfigurationError: If no key is configured or it cannot be read.
        """
        if not self._ssh_key_path:
            raise ConfigurationError("ssh_key_path (or DOKKEN_SSH_KEY) is required for upload")
        try:
            return Path(self._ssh_key_path).expanduser().read_text()
        except OSError as e:
            raise ConfigurationError(f"Cannot read ssh key {self._ssh_key_path}: {e}") from e

    def key_file(self) -> Path:
        base = self._tmpdir or Path(tempfile.gettempdir())
        return base / KEY_DIR_NAME / KEY_FILE_NAME

    def materialize_key(self) -> Path:
        """
        Write the private key to <tmpdir>/dokken/id_rsa, owner read/write only.

        The file is created (or truncated) with mode 0600 before any key bytes
        are written.

        Raises:
            ConfigurationError: If the key cannot be read or written.
        """
        key = self.private_key()
        path = self.key_file()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w") as f:
                os.fchmod(f.fileno(), 0o600)
                f.write(key)
        except OSError as e:
            raise ConfigurationError(f"Cannot write key material to {path}: {e}") from e
        console.print(f"[dim][DOKKEN] Key material written to {path}[/dim]")
        return path

    @staticmethod
    def split_command(command: str) -> list[str]:
        """Split a command line into argv with POSIX quoting, no expansion."""
        return shlex.split(command, posix=True)
