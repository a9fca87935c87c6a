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
# DOCKER PROVIDER - CONTAINER RUNTIME ADAPTER
# -----------------------------------------------------------------------------
# Responsibility: A thin wrapper around the Docker SDK exposing only what the
# transport needs: get/inspect container, exec, commit, tag, get/remove image.
#
# Every SDK failure is translated into RuntimeNotFound or RuntimeAdapterError
# so callers never depend on docker.errors directly. Tests substitute any
# object satisfying the ContainerRuntime protocol.
# -----------------------------------------------------------------------------

import os
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, Protocol

import docker
import requests
from docker import DockerClient
from docker.errors import DockerException, NotFound
from docker.models.containers import Container
from docker.models.images import Image
from rich.console import Console

console = Console()

# Observer for exec output: (stream name, raw chunk)
OutputObserver = Callable[[str, bytes], None]


class RuntimeAdapterError(Exception):
    """Raised when the container runtime is unreachable or rejects a request."""

    pass


class RuntimeNotFound(RuntimeAdapterError):
    """Raised when a container or image does not exist."""

    pass


@contextmanager
def _translate_errors(action: str) -> Iterator[None]:
    """Map Docker SDK and HTTP failures onto the adapter's error types."""
    try:
        yield
    except NotFound as e:
        raise RuntimeNotFound(f"{action}: {e}") from e
    except (DockerException, requests.RequestException) as e:
        raise RuntimeAdapterError(f"{action}: {e}") from e


class ContainerRuntime(Protocol):
    """Protocol for container runtimes - one implementation per backend."""

    def get_container(self, name: str) -> Any:
        ...

    def inspect_container(self, name: str) -> dict:
        ...

    def exec(self, container: Any, argv: list[str], on_output: OutputObserver) -> int:
        ...

    def commit(self, container: Any) -> Any:
        ...

    def tag(self, image: Any, repository: str, tag: str = "latest", force: bool = True) -> None:
        ...

    def get_image(self, name: str) -> Any:
        ...

    def remove_image(self, image: Any) -> None:
        ...

    def close(self) -> None:
        ...


class DockerRuntime:
    """
    ContainerRuntime backed by the Docker Engine API.

    When the endpoint matches DOCKER_HOST the client is built from the
    environment so DOCKER_TLS_VERIFY/DOCKER_CERT_PATH are honoured.
    """

    def __init__(self, base_url: str, timeout: int = 3600) -> None:
        """
        Connect to the Docker daemon.

        Args:
            base_url: Runtime endpoint (unix:// socket or tcp://host:port).
            timeout: HTTP timeout for API calls, in seconds.

        Raises:
            RuntimeAdapterError: If the daemon cannot be reached.
        """
        self._base_url = base_url
        with _translate_errors(f"connect {base_url}"):
            if base_url == os.getenv("DOCKER_HOST"):
                self._client: DockerClient = docker.from_env(timeout=timeout)
            else:
                self._client = docker.DockerClient(base_url=base_url, timeout=timeout)
        console.print(f"[green][DOCKER] Connected to Docker Engine at {base_url}[/green]")

    def get_container(self, name: str) -> Container:
        with _translate_errors(f"get container {name}"):
            return self._client.containers.get(name)

    def inspect_container(self, name: str) -> dict:
        """Return the runtime-reported descriptor (docker inspect) of a container."""
        with _translate_errors(f"inspect container {name}"):
            return self._client.api.inspect_container(name)

    def exec(self, container: Container, argv: list[str], on_output: OutputObserver) -> int:
        """
        Run argv inside the container, streaming output as it arrives.

        Uses the low-level API because the high-level exec_run() does not
        report an exit code when streaming.

        Returns:
            The exit code of the exec'd process.
        """
        api = self._client.api
        with _translate_errors(f"exec in {container.name}"):
            exec_id = api.exec_create(container.id, argv, stdout=True, stderr=True)["Id"]
            for stdout, stderr in api.exec_start(exec_id, stream=True, demux=True):
                if stdout:
                    on_output("stdout", stdout)
                if stderr:
                    on_output("stderr", stderr)
            return api.exec_inspect(exec_id)["ExitCode"]

    def commit(self, container: Container) -> Image:
        with _translate_errors(f"commit {container.name}"):
            return container.commit()

    def tag(self, image: Image, repository: str, tag: str = "latest", force: bool = True) -> None:
        with _translate_errors(f"tag {repository}:{tag}"):
            tagged = image.tag(repository, tag=tag, force=force)
        if not tagged:
            raise RuntimeAdapterError(f"tag {repository}:{tag}: daemon refused the tag")

    def get_image(self, name: str) -> Image:
        with _translate_errors(f"get image {name}"):
            return self._client.images.get(name)

    def remove_image(self, image: Image) -> None:
        with _translate_errors(f"remove image {image.id}"):
            self._client.images.remove(image=image.id)

    def close(self) -> None:
        """Release the underlying HTTP session."""
        with _translate_errors(f"close {self._base_url}"):
            self._client.close()
