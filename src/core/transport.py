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
# THE TRANSPORT MANAGER - CONNECTION REUSE
# -----------------------------------------------------------------------------
# Responsibility: Hand out a Connection for the current instance state.
#
# States:
# - Disconnected: no cached Connection
# - Connected: one cached Connection plus the options it was built with
#
# A cached Connection is reused iff freshly resolved options are equal to
# the cached ones. Otherwise the old Connection is closed (best-effort) and
# replaced. At most one Connection is live per manager.
# -----------------------------------------------------------------------------

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from rich.console import Console
from rich.markup import escape

from src.core.config import connection_options
from src.core.connection import Connection, RuntimeFactory, docker_runtime_factory
from src.core.helpers import TransportHelpers
from src.domain.models import ConnectionOptions, TransportConfig

console = Console()

T = TypeVar("T")


class DokkenTransport:
    """
    Transport that runs commands via docker exec and commits after each one.

    Not thread-safe: the owner serializes calls, one session at a time.
    """

    def __init__(
        self,
        config: TransportConfig | None = None,
        runtime_factory: RuntimeFactory = docker_runtime_factory,
        helpers: TransportHelpers | None = None,
    ) -> None:
        self.config = config or TransportConfig()
        self._runtime_factory = runtime_factory
        self._helpers = helpers or TransportHelpers(self.config.ssh_key_path)
        self._connection: Connection | None = None
        self._connection_options: ConnectionOptions | None = None

    @property
    def connected(self) -> bool:
        return self._connection is not None

    def connection(
        self, state: dict[str, Any], action: Callable[[Connection], T] | None = None
    ) -> Connection | T:
        """
        Get a Connection for the given instance state.

        Args:
            state: Mutable instance state (instance_name, kitchen_container, ...).
            action: Optional callable applied to the Connection.

        Returns:
            action's result if given, otherwise the Connection.

        Raises:
            ConfigurationError: If the merged data cannot be resolved.
        """
        options = connection_options({**self.config.model_dump(), **state})

        if self._connection is not None and self._connection_options == options:
            conn = self._reuse_connection()
        else:
            conn = self._create_new_connection(options)

        if action is not None:
            return action(conn)
        return conn

    @contextmanager
    def session(self, state: dict[str, Any]) -> Iterator[Connection]:
        """Scoped access to the Connection; it stays cached for reuse afterwards."""
        yield self.connection(state)

    def inspect_container(self, state: dict[str, Any]) -> dict:
        """
        Fetch the runtime descriptor (kitchen_container) for state's instance.

        Uses a short-lived runtime client so the cached Connection is untouched.

        Raises:
            ConfigurationError: If the merged data cannot be resolved.
            RuntimeAdapterError: If the runtime cannot inspect the container.
        """
        options = connection_options({**self.config.model_dump(), **state})
        runtime = self._runtime_factory(options)
        try:
            return runtime.inspect_container(options.instance_name)
        finally:
            runtime.close()

    def close(self) -> None:
        """Close the cached Connection and return to Disconnected."""
        if self._connection is not None:
            self._close_connection(self._connection)
        self._connection = None
        self._connection_options = None

    def _create_new_connection(self, options: ConnectionOptions) -> Connection:
        if self._connection is not None:
            console.print(f"[dim][DOKKEN] Shutting previous connection {self._connection!r}[/dim]")
            self._close_connection(self._connection)

        self._connection_options = options
        self._connection = Connection(
            options,
            config=self.config,
            runtime_factory=self._runtime_factory,
            helpers=self._helpers,
        )
        return self._connection

    def _reuse_connection(self) -> Connection:
        console.print(f"[dim][DOKKEN] Reusing existing connection {self._connection!r}[/dim]")
        return self._connection

    def _close_connection(self, conn: Connection) -> None:
        """Best-effort teardown: any close() failure is logged, never raised."""
        try:
            conn.close()
        except Exception as e:
            console.print(f"[yellow][DOKKEN] Error closing {conn!r}: {escape(str(e))}[/yellow]")
