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
# DOMAIN MODELS - TRANSPORT VALUE TYPES
# -----------------------------------------------------------------------------
# These Pydantic models describe what the transport is configured with and
# what a Connection is bound to. The Transport Manager compares
# ConnectionOptions by value to decide whether a Connection can be reused.
# -----------------------------------------------------------------------------

from typing import Any

from pydantic import BaseModel, Field

DEFAULT_TIMEOUT_SECONDS = 3600
DEFAULT_DOCKER_HOST = "unix:///var/run/docker.sock"


class TransportConfig(BaseModel):
    """
    Static transport configuration, merged with instance state at connect time.

    read_timeout/write_timeout are advisory: they are handed to the runtime
    client and never enforced by the transport itself.
    """

    read_timeout: int = Field(DEFAULT_TIMEOUT_SECONDS, gt=0)
    write_timeout: int = Field(DEFAULT_TIMEOUT_SECONDS, gt=0)
    docker_host: str | None = Field(None, description="Runtime endpoint, e.g. tcp://10.0.0.5:2376")
    image_prefix: str | None = Field(None, description="Repository prefix for work images")
    ssh_key_path: str | None = Field(None, description="Private key used by upload")
    rsync_binary: str = "rsync"
    ssh_user: str = "root"
    check_transfer: bool = Field(True, description="Raise TransferError on non-zero rsync exit")

    class Config:
        """Pydantic configuration for strict validation."""

        str_strip_whitespace = True
        extra = "forbid"


class ConnectionOptions(BaseModel):
    """
    Everything a Connection is bound to.

    Two options records are equal iff every field is structurally equal.
    That equality is the only reuse criterion used by the Transport Manager.
    """

    docker_host: str = Field(..., min_length=1)
    instance_name: str = Field(..., min_length=1)
    kitchen_container: dict[str, Any] | None = None
    image_prefix: str | None = None
    read_timeout: int = DEFAULT_TIMEOUT_SECONDS
    write_timeout: int = DEFAULT_TIMEOUT_SECONDS

    class Config:
        frozen = True


class LoginCommand(BaseModel):
    """An interactive-shell launch descriptor: binary plus arguments."""

    command: str
    arguments: list[str]

    def argv(self) -> list[str]:
        return [self.command, *self.arguments]

    def __str__(self) -> str:
        return " ".join(self.argv())


class TransferResult(BaseModel):
    """Outcome of one file-sync subprocess."""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0
