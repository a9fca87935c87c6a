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
# THE CONNECTION - EXEC / COMMIT SESSION AGAINST ONE CONTAINER
# -----------------------------------------------------------------------------
# Responsibility: Run commands inside a named container and sync files into
# it. Every successful command is checkpointed: the container is committed
# and tagged as the instance's work image, replacing the previous snapshot.
#
# Concurrency: a Connection is not thread-safe. Calls on one Connection must
# be serialized by the caller; concurrent execute/upload is undefined.
# -----------------------------------------------------------------------------

from collections.abc import Callable

from rich.console import Console
from rich.markup import escape

from src.core.config import ConfigurationError
from src.core.helpers import TransportHelpers
from src.domain.models import ConnectionOptions, LoginCommand, TransferResult, TransportConfig
from src.infra.docker_client import (
    ContainerRuntime,
    DockerRuntime,
    OutputObserver,
    RuntimeAdapterError,
    RuntimeNotFound,
)
from src.infra.rsync_client import build_rsync_command, run_rsync

console = Console()

WORK_IMAGE_TAG = "latest"
SSH_PORT_KEY = "22/tcp"

RuntimeFactory = Callable[[ConnectionOptions], ContainerRuntime]


class TransportFailed(Exception):
    """Base class for failures raised by the transport."""

    pass


class DockerExecFailed(TransportFailed):
    """Raised when a command exits non-zero inside the container."""

    def __init__(self, exit_code: int, command: str) -> None:
        super().__init__(f"Docker Exec ({exit_code}) for command: [{command}]")
        self.exit_code = exit_code
        self.command = command


def docker_runtime_factory(options: ConnectionOptions) -> ContainerRuntime:
    """Default factory: a Docker Engine client for the options' endpoint."""
    return DockerRuntime(options.docker_host, timeout=options.read_timeout)


def runtime_host(endpoint: str) -> str:
    """
    Derive the address published container ports are reachable on.

    tcp://host:port gives host; a local unix socket gives 127.0.0.1.

    Raises:
        ConfigurationError: If the endpoint cannot be parsed.
    """
    if endpoint.startswith("tcp://"):
        host = endpoint.split("tcp://", 1)[1].split(":")[0]
        if host:
            return host
    elif endpoint.startswith("unix://"):
        return "127.0.0.1"
    raise ConfigurationError(f"Cannot derive a host from runtime endpoint: {endpoint!r}")


def ssh_host_port(kitchen_container: dict | None) -> str:
    """
    Find the host port published for the container's 22/tcp.

    Raises:
        ConfigurationError: If the descriptor has no such mapping.
    """
    try:
        return str(kitchen_container["NetworkSettings"]["Ports"][SSH_PORT_KEY][0]["HostPort"])
    except (KeyError, IndexError, TypeError) as e:
        raise ConfigurationError(
            f"kitchen_container does not publish {SSH_PORT_KEY}; cannot upload"
        ) from e


def print_output(stream: str, chunk: bytes) -> None:
    """Default exec observer: echo each chunk tagged with its stream."""
    text = chunk.decode("utf-8", errors="replace").rstrip("\n")
    console.print(f"{stream}: {text}", markup=False, highlight=False)


class Connection:
    """
    A session bound to one container.

    The runtime client is created on first use and cached until close().
    """

    def __init__(
        self,
        options: ConnectionOptions,
        config: TransportConfig | None = None,
        runtime_factory: RuntimeFactory = docker_runtime_factory,
        helpers: TransportHelpers | None = None,
        on_output: OutputObserver = print_output,
    ) -> None:
        self.options = options
        self._config = config or TransportConfig()
        self._runtime_factory = runtime_factory
        self._helpers = helpers or TransportHelpers(self._config.ssh_key_path)
        self._on_output = on_output
        self._runtime: ContainerRuntime | None = None

    def __repr__(self) -> str:
        return f"<Connection {self.instance_name} via {self.options.docker_host}>"

    @property
    def instance_name(self) -> str:
        return self.options.instance_name

    @property
    def runtime(self) -> ContainerRuntime:
        if self._runtime is None:
            self._runtime = self._runtime_factory(self.options)
        return self._runtime

    def work_image(self) -> str:
        """Image name that holds this instance's latest snapshot."""
        if self.options.image_prefix:
            return f"{self.options.image_prefix}/{self.instance_name}"
        return self.instance_name

    def execute(self, command: str | None) -> None:
        """
        Run a command in the container, then checkpoint it as the work image.

        Args:
            command: Shell-style command line; None, "" or whitespace is a no-op.

        Raises:
            DockerExecFailed: Non-zero exit. Nothing is committed.
            RuntimeAdapterError: The runtime failed on get/exec/commit/tag.
        """
        if not command:
            return

        argv = self._helpers.split_command(command)
        if not argv:
            return

        runner = self.runtime.get_container(self.instance_name)

        console.print(f"[cyan][DOKKEN] {self.instance_name}: {escape(command)}[/cyan]")
        exit_code = self.runtime.exec(runner, argv, self._on_output)

        if exit_code != 0:
            console.print(f"[red][DOKKEN] Exec FAILED (exit: {exit_code})[/red]")
            raise DockerExecFailed(exit_code, command)

        self._remove_work_image()

        new_image = self.runtime.commit(runner)
        self.runtime.tag(new_image, self.work_image(), tag=WORK_IMAGE_TAG, force=True)
        console.print(f"[green][DOKKEN] Committed {self.work_image()}:{WORK_IMAGE_TAG}[/green]")

    def _remove_work_image(self) -> None:
        """Best-effort removal of the previous snapshot."""
        work_image = self.work_image()
        try:
            old_image = self.runtime.get_image(work_image)
            self.runtime.remove_image(old_image)
        except RuntimeNotFound:
            console.print(f"[dim][DOKKEN] {work_image} not present. nothing to remove.[/dim]")
        except RuntimeAdapterError as e:
            console.print(f"[dim][DOKKEN] Could not remove {work_image}: {escape(str(e))}[/dim]")

    def upload(self, locals_: list[str] | str, remote: str) -> TransferResult:
        """
        Copy local paths into the container with rsync over its SSH port.

        Args:
            locals_: One path or a list of paths on this host.
            remote: Destination directory inside the container.

        Returns:
            TransferResult of the rsync run.

        Raises:
            ConfigurationError: Endpoint, port mapping or key material missing.
            TransferError: rsync missing, or non-zero exit with check_transfer.
        """
        if isinstance(locals_, str):
            locals_ = [locals_]

        host = runtime_host(self.options.docker_host)
        port = ssh_host_port(self.options.kitchen_container)
        key_path = self._helpers.materialize_key()

        cmd = build_rsync_command(
            locals_,
            remote,
            host=host,
            port=port,
            key_path=key_path,
            user=self._config.ssh_user,
            rsync_binary=self._config.rsync_binary,
        )
        return run_rsync(cmd, check=self._config.check_transfer)

    def login_command(self) -> LoginCommand:
        """Command line that attaches an interactive login shell to the container."""
        return LoginCommand(
            command="docker",
            arguments=[
                "-H", self.options.docker_host,
                "exec", "-it", self.instance_name,
                "/bin/bash", "--login", "-i",
            ],
        )

    def close(self) -> None:
        """Release the runtime client, if one was created."""
        runtime, self._runtime = self._runtime, None
        if runtime is not None:
            runtime.close()
