from .evm import (
    ChainClient,
    ChainInfo,
    LocalSigner,
    CirclePermitPaymaster,
    build_permit_payload,
    sign_permit,
    encode_paymaster_data,
    decode_paymaster_data,
    parse_erc6492_signature,
)
from .engine.exceptions import (
    ContractReadError,
    SigningError,
    InvalidSignatureError,
    SignatureWrapperError,
    PaymasterDataError,
    ConfigurationError,
)
from .utils import logger, setup_logger

__all__ = [
    "ChainClient",
    "ChainInfo",
    "LocalSigner",
    "CirclePermitPaymaster",
    "build_permit_payload",
    "sign_permit",
    "encode_paymaster_data",
    "decode_paymaster_data",
    "parse_erc6492_signature",
    "ContractReadError",
    "SigningError",
    "InvalidSignatureError",
    "SignatureWrapperError",
    "PaymasterDataError",
    "ConfigurationError",
    "logger",
    "setup_logger",
]
