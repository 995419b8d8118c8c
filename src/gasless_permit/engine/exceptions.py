"""
Exception and Error Definitions Module

Defines the exception hierarchy for permit construction, signing,
verification and paymaster-data handling. All exceptions inherit from
BaseException for unified exception handling.

Exception Hierarchy:
    BaseException (root)
    ├── PaymentSignatureError
    │   ├── SigningError
    │   └── SignatureWrapperError
    ├── PaymentVerificationError
    │   └── SignatureVerificationError
    │       └── InvalidSignatureError
    ├── BlockchainInteractionError
    │   └── ContractReadError
    ├── PaymasterDataError
    └── ConfigurationError

None of these errors are retried internally. Error payloads may carry
addresses and signatures (replay-relevant data) but never private keys.
"""

from typing import Optional, Union


class BaseException(Exception):
    """
    Root exception class for all project-specific exceptions.

    All custom exceptions should inherit from this class to enable
    unified exception handling and centralized error processing.
    """
    pass


class PaymentSignatureError(BaseException):
    """
    Raised when signature generation or processing fails.

    This includes scenarios such as:
    - Signer unavailable or request declined
    - Signature encoding errors
    """
    pass


class SigningError(PaymentSignatureError):
    """
    Raised when the signer capability itself fails.

    Typical causes are a user rejecting the signing prompt, a key that is
    not available, or a typed-data payload the signer refuses to encode.

    Attributes:
        address: Address of the signer that failed.
    """

    def __init__(self, message: str, *, address: Optional[str] = None):
        super().__init__(message)
        self.address = address


class SignatureWrapperError(PaymentSignatureError):
    """
    Raised when a signature carries the ERC-6492 magic suffix but its
    wrapper cannot be decoded.

    Attributes:
        signature: The offending signature as 0x-prefixed hex.
    """

    def __init__(self, message: str, *, signature: Optional[str] = None):
        super().__init__(message)
        self.signature = signature


class PaymentVerificationError(BaseException):
    """
    Base exception for verification failures.
    """
    pass


class SignatureVerificationError(PaymentVerificationError):
    """
    Raised when signature verification fails.

    This includes scenarios such as:
    - Signature from wrong address
    - Tampered typed data
    - Signer address mismatch
    """
    pass


class InvalidSignatureError(SignatureVerificationError):
    """
    Raised when a freshly produced permit signature does not verify against
    the claimed signer.

    Attributes:
        signer: Address the signature was expected to belong to.
        signature: The rejected signature as 0x-prefixed hex.
    """

    def __init__(self, signer: str, signature: Union[bytes, str]):
        if isinstance(signature, (bytes, bytearray)):
            signature = "0x" + bytes(signature).hex()
        super().__init__(f"Invalid permit signature for {signer}: {signature}")
        self.signer = signer
        self.signature = signature


class BlockchainInteractionError(BaseException):
    """
    Raised when blockchain interaction (RPC call) fails.

    This includes scenarios such as:
    - RPC call timeout
    - Network connectivity issues
    - Invalid contract address
    - Contract call revert
    """
    pass


class ContractReadError(BlockchainInteractionError):
    """
    Raised when a read-only contract call fails.

    Typical causes are a token that does not implement EIP-2612
    (no ``version()`` or ``nonces()``) or an unavailable RPC endpoint.

    Attributes:
        address: Contract address that was called.
        method: Name of the view function that failed.
    """

    def __init__(
        self,
        message: str,
        *,
        address: Optional[str] = None,
        method: Optional[str] = None,
    ):
        super().__init__(message)
        self.address = address
        self.method = method


class PaymasterDataError(BaseException):
    """
    Raised when paymaster data cannot be encoded or decoded.
    """
    pass


class ConfigurationError(BaseException):
    """
    Raised when configuration is missing or invalid.

    This includes scenarios such as:
    - Missing required environment variables
    - Unsupported network configuration
    - Unknown asset symbol on a configured chain
    """
    pass
