"""
EIP-2612 Permit Signing

Builds the EIP-712 ``Permit`` payload from live token state, has the
owner sign it, verifies the result independently and returns the raw
signature the paymaster expects.

Exported helpers
----------------
build_permit_payload
    Read ``name()``, ``version()`` and ``nonces(owner)`` concurrently and
    assemble an ``EIP2612TypedData`` with a never-expiring deadline.

sign_permit
    Full flow: build -> sign -> verify -> unwrap ERC-6492.  Every failure is
    terminal; callers restart from scratch since the nonce may have moved.
"""

import asyncio

from ..utils import logger, mask_hex
from ..engine.exceptions import ContractReadError, InvalidSignatureError, SigningError
from .constants import MAX_UINT256
from .erc6492 import parse_erc6492_signature, signature_to_bytes
from .standards import EIP712Domain, EIP2612TypedData, PermitMessage


async def build_permit_payload(
    *,
    token,
    chain,
    owner_address: str,
    spender_address: str,
    value: int,
) -> EIP2612TypedData:
    """
    Build the EIP-712 typed data for an EIP-2612 ``permit``.

    Args:
        token:           Token capability with ``address`` and async
                         ``name()``, ``version()``, ``nonces(owner)``.
        chain:           Object exposing the integer chain id as ``id``.
        owner_address:   Token owner; the account that will sign.
        spender_address: Address allowed to spend (the paymaster).
        value:           Allowance in the token's smallest unit.

    Returns:
        ``EIP2612TypedData`` with numeric message fields as decimal strings.

    Raises:
        ContractReadError: If any of the three token reads fails.
        ValueError:        If ``value`` is outside the uint256 range.

    Example::

        payload = await build_permit_payload(
            token=client.get_token(usdc_address),
            chain=client.chain,
            owner_address=account.address,
            spender_address=paymaster_address,
            value=10_000_000,  # 10 USDC
        )
    """
    if not 0 <= int(value) <= MAX_UINT256:
        raise ValueError(f"Permit value out of uint256 range: {value}")

    try:
        name, version, nonce = await asyncio.gather(
            token.name(),
            token.version(),
            token.nonces(owner_address),
        )
    except ContractReadError:
        raise
    except Exception as exc:
        raise ContractReadError(
            f"Failed to read permit state from token {token.address}: {exc}",
            address=token.address,
        ) from exc

    domain = EIP712Domain(
        name=name,
        version=version,
        chainId=int(chain.id),
        verifyingContract=token.address,
    )
    message = PermitMessage(
        owner=owner_address,
        spender=spender_address,
        value=str(int(value)),
        nonce=str(int(nonce)),
        # The paymaster cannot access block.timestamp due to 4337 opcode
        # restrictions, so the deadline must be MAX_UINT256.
        deadline=str(MAX_UINT256),
    )
    return EIP2612TypedData(domain=domain, message=message)


async def sign_permit(
    *,
    token_address: str,
    client,
    account,
    spender_address: str,
    permit_amount: int,
) -> bytes:
    """
    Produce a verified EIP-2612 permit signature for ``spender_address``.

    Args:
        token_address:   EIP-2612 token contract.
        client:          Chain client with ``chain``, ``get_token(address)`` and
                         async ``verify_typed_data(payload, address, signature)``.
        account:         Signer with ``address`` and async ``sign_typed_data(payload)``.
        spender_address: Address allowed to spend (the paymaster).
        permit_amount:   Allowance in the token's smallest unit.

    Returns:
        Raw signature bytes with any ERC-6492 wrapper removed.

    Raises:
        ContractReadError:     Token state or account code could not be read.
        SigningError:          The signer failed or declined.
        InvalidSignatureError: The signature does not verify for ``account.address``.
    """
    logger.debug(
        "Creating permit: token=%s spender=%s amount=%s",
        token_address, spender_address, permit_amount,
    )

    token = client.get_token(token_address)
    payload = await build_permit_payload(
        token=token,
        chain=client.chain,
        owner_address=account.address,
        spender_address=spender_address,
        value=permit_amount,
    )

    try:
        wrapped_signature = signature_to_bytes(await account.sign_typed_data(payload))
    except SigningError:
        raise
    except Exception as exc:
        raise SigningError(
            f"Signer {account.address} failed to sign permit: {exc}",
            address=account.address,
        ) from exc
    logger.debug("Permit signature from %s: %s", account.address, mask_hex(wrapped_signature))

    # Verification always runs before the signature is returned.
    is_valid = await client.verify_typed_data(payload, account.address, wrapped_signature)
    logger.info("Permit signature valid for %s: %s", account.address, is_valid)
    if not is_valid:
        raise InvalidSignatureError(account.address, wrapped_signature)

    return parse_erc6492_signature(wrapped_signature).signature
