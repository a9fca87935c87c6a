# -----------------------------------------------------------------------------
# DOMAIN LAYER
# -----------------------------------------------------------------------------
# Value types shared by the transport: configuration, connection options,
# login descriptors and transfer results.
# -----------------------------------------------------------------------------

from .models import ConnectionOptions, LoginCommand, TransferResult, TransportConfig

__all__ = ["ConnectionOptions", "LoginCommand", "TransferResult", "TransportConfig"]
