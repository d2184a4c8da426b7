from .nonce import NonceManager, NonceRegistry
from .operator import Operator, connect
from .private_tx import PrivateTxRelay, build_private_tx_request, flashbots_signature
from .user_config import (
    UserConfiguration,
    config_data,
    decode_user_configuration,
    is_using_as_collateral,
)

__all__ = [
    "NonceManager",
    "NonceRegistry",
    "Operator",
    "connect",
    "PrivateTxRelay",
    "build_private_tx_request",
    "flashbots_signature",
    "UserConfiguration",
    "config_data",
    "decode_user_configuration",
    "is_using_as_collateral",
]
