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
# TRANSPORT CONFIGURATION
# -----------------------------------------------------------------------------
# Responsibility: Load the transport configuration (YAML file plus
# environment overrides) and resolve it, merged with mutable instance state,
# into an immutable ConnectionOptions record.
# -----------------------------------------------------------------------------

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from rich.console import Console

from src.domain.models import (
    DEFAULT_DOCKER_HOST,
    DEFAULT_TIMEOUT_SECONDS,
    ConnectionOptions,
    TransportConfig,
)

console = Console()

CONFIG_PATH = Path("dokken.yaml")

# Environment variable -> TransportConfig field
ENV_OVERRIDES = {
    "DOCKER_HOST": "docker_host",
    "DOKKEN_IMAGE_PREFIX": "image_prefix",
    "DOKKEN_SSH_KEY": "ssh_key_path",
    "DOKKEN_READ_TIMEOUT": "read_timeout",
    "DOKKEN_WRITE_TIMEOUT": "write_timeout",
}


class ConfigurationError(Exception):
    """Raised when a required option is missing or malformed."""

    pass


def load_config(path: Path = CONFIG_PATH) -> TransportConfig:
    """
    Load transport configuration from YAML, then apply environment overrides.

    Args:
        path: Path to the YAML file. A missing file means defaults.

    Returns:
        Validated TransportConfig.

    Raises:
        ConfigurationError: If the file is not a mapping or a value is invalid.
    """
    data: dict[str, Any] = {}

    if path.exists():
        with open(path) as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ConfigurationError(f"{path}: expected a mapping, got {type(loaded).__name__}")
        data.update(loaded)
        console.print(f"[green][CONFIG] Loaded {path}[/green]")
    else:
        console.print(f"[yellow][CONFIG] {path} not found, using defaults[/yellow]")

    for env_var, field in ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if value:
            data[field] = value

    try:
        return TransportConfig(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid transport configuration: {e}") from e


def connection_options(data: dict[str, Any]) -> ConnectionOptions:
    """
    Build the options a Connection is constructed with.

    Args:
        data: Transport configuration merged with mutable instance state.

    Returns:
        ConnectionOptions; equal inputs always give equal options.

    Raises:
        ConfigurationError: If instance_name is missing or a field is invalid.
    """
    if not data.get("instance_name"):
        raise ConfigurationError("instance_name is required to connect")

    docker_host = data.get("docker_host") or os.getenv("DOCKER_HOST") or DEFAULT_DOCKER_HOST

    try:
        return ConnectionOptions(
            docker_host=docker_host,
            instance_name=data["instance_name"],
            kitchen_container=data.get("kitchen_container"),
            image_prefix=data.get("image_prefix"),
            read_timeout=data.get("read_timeout", DEFAULT_TIMEOUT_SECONDS),
            write_timeout=data.get("write_timeout", DEFAULT_TIMEOUT_SECONDS),
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid connection options: {e}") from e
