from .clients import (
    ChainClient,
    ChainInfo,
    EIP2612Token,
    LocalSigner,
    encode_transfer_call,
)
from .constants import (
    MAX_UINT256,
    ENTRYPOINT_V07,
    PAYMASTER_MODE_PERMIT,
    EvmAssetConfig,
    EvmChainConfig,
    get_chain_config,
    get_asset_config,
    get_rpc_url,
    get_private_key_from_env,
    get_recipient_address_from_env,
    amount_to_value,
    value_to_amount,
)
from .erc6492 import (
    ERC6492Signature,
    is_erc6492_signature,
    parse_erc6492_signature,
    serialize_erc6492_signature,
)
from .paymaster import CirclePermitPaymaster, encode_paymaster_data, decode_paymaster_data
from .schemas import PaymasterFields, PaymasterPermitData, SignedAuthorization
from .signatures import build_permit_payload, sign_permit
from .standards import EIP712Domain, PermitMessage, EIP2612TypedData
from .verifies import verify_typed_data, typed_data_digest

__all__ = [
    "ChainClient",
    "ChainInfo",
    "EIP2612Token",
    "LocalSigner",
    "encode_transfer_call",
    "MAX_UINT256",
    "ENTRYPOINT_V07",
    "PAYMASTER_MODE_PERMIT",
    "EvmAssetConfig",
    "EvmChainConfig",
    "get_chain_config",
    "get_asset_config",
    "get_rpc_url",
    "get_private_key_from_env",
    "get_recipient_address_from_env",
    "amount_to_value",
    "value_to_amount",
    "ERC6492Signature",
    "is_erc6492_signature",
    "parse_erc6492_signature",
    "serialize_erc6492_signature",
    "CirclePermitPaymaster",
    "encode_paymaster_data",
    "decode_paymaster_data",
    "PaymasterFields",
    "PaymasterPermitData",
    "SignedAuthorization",
    "build_permit_payload",
    "sign_permit",
    "EIP712Domain",
    "PermitMessage",
    "EIP2612TypedData",
    "verify_typed_data",
    "typed_data_digest",
]
