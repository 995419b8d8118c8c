"""
ERC-6492 signature wrapping.

A smart account that is not deployed yet cannot answer ERC-1271 calls, so
its signatures are wrapped as::

    abi.encode(address factory, bytes factoryCalldata, bytes signature) ++ 0x6492...6492

Verifiers that understand the wrapper can deploy the account in a simulated
call first.  The paymaster expects only the inner signature, which is what
``parse_erc6492_signature`` extracts.  These helpers are pure: no RPC.
"""

from dataclasses import dataclass
from typing import Optional, Union

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from eth_utils import to_bytes, to_checksum_address

from ..engine.exceptions import SignatureWrapperError
from .constants import ERC6492_MAGIC_SUFFIX

SignatureLike = Union[bytes, bytearray, str]


@dataclass(frozen=True)
class ERC6492Signature:
    """
    Parts of a (possibly) ERC-6492 wrapped signature.

    Attributes:
        signature: The inner signature bytes.
        address: Account factory address, ``None`` when not wrapped.
        data: Factory calldata deploying the account, ``None`` when not wrapped.
    """
    signature: bytes
    address: Optional[str] = None
    data: Optional[bytes] = None

    @property
    def is_wrapped(self) -> bool:
        return self.address is not None


def signature_to_bytes(signature: SignatureLike) -> bytes:
    """Normalise a ``bytes`` or 0x-hex signature to ``bytes``."""
    if isinstance(signature, (bytes, bytearray)):
        return bytes(signature)
    if isinstance(signature, str):
        try:
            return to_bytes(hexstr=signature)
        except ValueError as exc:
            raise SignatureWrapperError(
                f"Signature is not valid hex: {signature!r}", signature=signature
            ) from exc
    raise TypeError(f"Expected bytes or hex string, got {type(signature).__name__}")


def is_erc6492_signature(signature: SignatureLike) -> bool:
    """True when ``signature`` ends with the ERC-6492 magic suffix."""
    return signature_to_bytes(signature).endswith(ERC6492_MAGIC_SUFFIX)


def parse_erc6492_signature(signature: SignatureLike) -> ERC6492Signature:
    """
    Split an ERC-6492 wrapped signature into factory, calldata and inner
    signature.  Unwrapped input is returned as the inner signature.

    Raises:
        SignatureWrapperError: If the magic suffix is present but the
            wrapper does not ABI-decode.
    """
    raw = signature_to_bytes(signature)
    if not raw.endswith(ERC6492_MAGIC_SUFFIX):
        return ERC6492Signature(signature=raw)

    body = raw[: -len(ERC6492_MAGIC_SUFFIX)]
    try:
        factory, factory_data, inner = decode(["address", "bytes", "bytes"], body)
    except DecodingError as exc:
        raise SignatureWrapperError(
            f"Malformed ERC-6492 signature wrapper: {exc}",
            signature="0x" + raw.hex(),
        ) from exc

    return ERC6492Signature(
        signature=bytes(inner),
        address=to_checksum_address(factory),
        data=bytes(factory_data),
    )


def serialize_erc6492_signature(
    *,
    address: str,
    data: SignatureLike,
    signature: SignatureLike,
) -> bytes:
    """Wrap ``signature`` with the factory deployment data and magic suffix."""
    encoded = encode(
        ["address", "bytes", "bytes"],
        [
            to_checksum_address(address),
            signature_to_bytes(data),
            signature_to_bytes(signature),
        ],
    )
    return encoded + ERC6492_MAGIC_SUFFIX
