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
# RSYNC INFRASTRUCTURE - FILE SYNC OVER THE CONTAINER'S SSH PORT
# -----------------------------------------------------------------------------
# Responsibility: Compose and run one rsync invocation per upload, tunnelled
# through ssh to the host port the runtime published for the container's
# port 22.
#
# The ssh options are fixed: no host key checking, no compression, no
# password authentication, errors-only logging, explicit port.
# -----------------------------------------------------------------------------

import subprocess
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from src.domain.models import TransferResult

console = Console()

SSH_OPTIONS = [
    "CheckHostIP=no",
    "Compression=no",
    "PasswordAuthentication=no",
    "StrictHostKeyChecking=no",
    "UserKnownHostsFile=/dev/null",
    "LogLevel=ERROR",
]


class TransferError(Exception):
    """Raised when the file-sync subprocess fails or cannot be started."""

    def __init__(self, message: str, returncode: int = -1, stderr: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


def build_ssh_command(key_path: Path, port: int | str) -> str:
    """Build the remote-shell string handed to rsync's -e flag."""
    parts = ["ssh", "-i", str(key_path)]
    for option in SSH_OPTIONS:
        parts += ["-o", option]
    parts += ["-p", str(port)]
    return " ".join(parts)


def build_rsync_command(
    locals_: list[str],
    remote: str,
    host: str,
    port: int | str,
    key_path: Path,
    user: str = "root",
    rsync_binary: str = "rsync",
) -> list[str]:
    """
    Compose the rsync argv for copying local paths into the container.

    Args:
        locals_: Local files or directories to copy.
        remote: Destination path inside the container.
        host: Address the runtime publishes container ports on.
        port: Published host port for the container's 22/tcp.
        key_path: Private key file for ssh authentication.
        user: Remote login user.
        rsync_binary: rsync executable name or path.

    Returns:
        argv suitable for subprocess.run (no shell involved).
    """
    return [
        rsync_binary,
        "-a",
        "-e",
        build_ssh_command(key_path, port),
        *locals_,
        f"{user}@{host}:{remote}",
    ]


def run_rsync(cmd: list[str], check: bool = True) -> TransferResult:
    """
    Run rsync and wait for it to finish.

    Args:
        cmd: argv from build_rsync_command.
        check: Raise TransferError on non-zero exit instead of returning it.

    Returns:
        TransferResult with exit status and captured output.

    Raises:
        TransferError: If rsync is missing, or exits non-zero and check=True.
    """
    console.print(f"[cyan][RSYNC] Syncing to {escape(cmd[-1])}[/cyan]")

    try:
        proc = subprocess.run(cmd, capture_output=True, text=True)
    except FileNotFoundError as e:
        raise TransferError(f"rsync not found: {cmd[0]}") from e
    except subprocess.SubprocessError as e:
        raise TransferError(f"rsync subprocess error: {e}") from e

    result = TransferResult(returncode=proc.returncode, stdout=proc.stdout, stderr=proc.stderr)

    if result.ok:
        console.print("[green][RSYNC] Transfer complete[/green]")
    elif check:
        console.print(f"[red][RSYNC] Transfer failed (exit: {result.returncode})[/red]")
        raise TransferError(
            f"rsync exited with {result.returncode}: {result.stderr.strip()[:500]}",
            returncode=result.returncode,
            stderr=result.stderr,
        )
    else:
        console.print(f"[yellow][RSYNC] Transfer exited with {result.returncode}[/yellow]")

    return result
