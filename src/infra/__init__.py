# -----------------------------------------------------------------------------
# INFRASTRUCTURE LAYER
# -----------------------------------------------------------------------------
# Contains low-level infrastructure wrappers:
# - DockerRuntime: Docker SDK adapter implementing ContainerRuntime
# - rsync_client: file sync over the container's published SSH port
# -----------------------------------------------------------------------------

from .docker_client import ContainerRuntime, DockerRuntime, RuntimeAdapterError, RuntimeNotFound
from .rsync_client import TransferError, build_rsync_command, run_rsync

__all__ = [
    "ContainerRuntime", "DockerRuntime", "RuntimeAdapterError", "RuntimeNotFound",
    "TransferError", "build_rsync_command", "run_rsync",
]
