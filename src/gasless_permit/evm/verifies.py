"""
EVM Typed-Data Signature Verification

Off-chain verification of EIP-712 signatures for both plain key pairs and
smart-contract accounts.

verify_typed_data
    Unwrap any ERC-6492 wrapper, try ECDSA recovery of the EIP-712 digest,
    and, when a Web3 provider is supplied and the address holds code, fall
    back to an ERC-1271 ``isValidSignature`` call.

Counterfactual (not yet deployed) accounts are only checked by ECDSA
recovery of the inner signature; no deployment is simulated.
"""

from typing import Optional

from eth_account import Account
from eth_account.messages import SignableMessage, encode_typed_data
from eth_utils import keccak
from web3 import AsyncWeb3
from web3.exceptions import BadFunctionCallOutput, ContractLogicError

from ..utils import logger
from ..engine.exceptions import ContractReadError, SignatureWrapperError
from .constants import ERC1271_MAGIC_VALUE
from .erc6492 import SignatureLike, parse_erc6492_signature
from .ERC20_ABI import get_erc1271_abi
from .standards import EIP2612TypedData


def typed_data_signable(payload: EIP2612TypedData) -> SignableMessage:
    """Encode ``payload`` as an EIP-712 ``SignableMessage``."""
    return encode_typed_data(full_message=payload.to_signable_dict())


def _signable_digest(signable: SignableMessage) -> bytes:
    return keccak(b"\x19" + signable.version + signable.header + signable.body)


def typed_data_digest(payload: EIP2612TypedData) -> bytes:
    """The 32-byte EIP-712 digest that is actually signed."""
    return _signable_digest(typed_data_signable(payload))


async def _verify_erc1271(
    w3: AsyncWeb3,
    *,
    address: str,
    digest: bytes,
    signature: bytes,
) -> bool:
    """
    Ask a smart-contract account whether ``signature`` is valid for ``digest``.

    Returns ``False`` when the address has no code or the call reverts.

    Raises:
        ContractReadError: If the RPC itself fails.
    """
    checksum = AsyncWeb3.to_checksum_address(address)
    try:
        code = await w3.eth.get_code(checksum)
    except Exception as exc:
        raise ContractReadError(
            f"Failed to read code of {checksum}: {exc}",
            address=checksum,
            method="eth_getCode",
        ) from exc
    if not code:
        return False

    contract = w3.eth.contract(address=checksum, abi=get_erc1271_abi())
    try:
        result: bytes = await contract.functions.isValidSignature(digest, signature).call()
    except (ContractLogicError, BadFunctionCallOutput) as exc:
        logger.debug("ERC-1271 isValidSignature rejected for %s: %s", checksum, exc)
        return False
    except Exception as exc:
        raise ContractReadError(
            f"Failed to call isValidSignature() on {checksum}: {exc}",
            address=checksum,
            method="isValidSignature",
        ) from exc
    return bytes(result) == ERC1271_MAGIC_VALUE


async def verify_typed_data(
    payload: EIP2612TypedData,
    address: str,
    signature: SignatureLike,
    *,
    w3: Optional[AsyncWeb3] = None,
) -> bool:
    """
    Verify that ``signature`` over ``payload`` belongs to ``address``.

    Args:
        payload:   EIP-712 typed data that was signed.
        address:   Expected signer (EOA or smart-contract account).
        signature: Signature bytes or 0x-hex, optionally ERC-6492 wrapped.
        w3:        Optional ``AsyncWeb3`` used for the ERC-1271 fallback.
                   When ``None``, only ECDSA recovery is attempted.

    Returns:
        ``True`` if the signature is valid for ``address``, ``False``
        otherwise.  Malformed signatures yield ``False``.

    Raises:
        ContractReadError: If the RPC fails during the ERC-1271 fallback.
    """
    try:
        inner = parse_erc6492_signature(signature).signature
    except SignatureWrapperError as exc:
        logger.debug("Rejecting signature with unreadable wrapper: %s", exc)
        return False

    signable = typed_data_signable(payload)

    # ---- EOA: ECDSA recovery ----
    try:
        recovered = Account.recover_message(signable, signature=inner)
        if recovered.lower() == address.lower():
            return True
    except Exception as exc:
        logger.debug("ECDSA recovery failed for %s: %s", address, exc)

    # ---- ERC-1271: smart-contract account ----
    if w3 is not None:
        return await _verify_erc1271(
            w3,
            address=address,
            digest=_signable_digest(signable),
            signature=inner,
        )

    return False
