# -----------------------------------------------------------------------------
# CORE LAYER
# -----------------------------------------------------------------------------
# The transport itself:
# - DokkenTransport: decides connection reuse vs rebuild
# - Connection: exec/commit and rsync upload against one container
# - config: YAML/env loading and connection option resolution
# - TransportHelpers: key material and command splitting
# -----------------------------------------------------------------------------

from .config import ConfigurationError, connection_options, load_config
from .connection import Connection, DockerExecFailed, TransportFailed
from .helpers import TransportHelpers
from .transport import DokkenTransport

__all__ = [
    "ConfigurationError", "connection_options", "load_config",
    "Connection", "DockerExecFailed", "TransportFailed",
    "TransportHelpers",
    "DokkenTransport",
]
