"""
Circle Paymaster Data

The permit-paying paymaster reads its authorization from ``paymasterData``
laid out as::

    [1-byte mode][20-byte token][32-byte permit amount][signature ...]

``encode_paymaster_data`` / ``decode_paymaster_data`` implement that layout
bit-for-bit.  ``CirclePermitPaymaster`` is the object a bundler client asks
for paymaster fields while preparing each user operation.
"""

from typing import Union

from eth_abi.packed import encode_packed
from web3 import AsyncWeb3

from ..utils import logger
from ..engine.exceptions import PaymasterDataError
from .constants import PAYMASTER_MODE_PERMIT
from .erc6492 import SignatureLike, signature_to_bytes
from .schemas import PaymasterFields, PaymasterPermitData
from .signatures import sign_permit

_MODE_SIZE = 1
_ADDRESS_SIZE = 20
_AMOUNT_SIZE = 32
_HEADER_SIZE = _MODE_SIZE + _ADDRESS_SIZE + _AMOUNT_SIZE


def encode_paymaster_data(
    *,
    token: str,
    permit_amount: int,
    signature: SignatureLike,
    mode: int = PAYMASTER_MODE_PERMIT,
) -> bytes:
    """
    Pack ``(uint8 mode, address token, uint256 amount, bytes signature)``
    without padding, as Solidity's ``abi.encodePacked`` does.

    Raises:
        PaymasterDataError: If a field is out of range for its width.
    """
    if not 0 <= mode <= 0xFF:
        raise PaymasterDataError(f"mode must fit in one byte, got {mode}")
    if not 0 <= permit_amount < 2**256:
        raise PaymasterDataError(f"permit_amount out of uint256 range: {permit_amount}")

    return encode_packed(
        ["uint8", "address", "uint256", "bytes"],
        [
            mode,
            AsyncWeb3.to_checksum_address(token),
            permit_amount,
            signature_to_bytes(signature),
        ],
    )


def decode_paymaster_data(data: Union[bytes, str]) -> PaymasterPermitData:
    """
    Split packed paymaster data back into its fields.

    Raises:
        PaymasterDataError: If ``data`` is shorter than the fixed header.
    """
    raw = signature_to_bytes(data)
    if len(raw) < _HEADER_SIZE:
        raise PaymasterDataError(
            f"Paymaster data too short: {len(raw)} bytes, need at least {_HEADER_SIZE}"
        )

    token = raw[_MODE_SIZE:_MODE_SIZE + _ADDRESS_SIZE]
    amount = raw[_MODE_SIZE + _ADDRESS_SIZE:_HEADER_SIZE]
    return PaymasterPermitData(
        mode=raw[0],
        token=AsyncWeb3.to_checksum_address(token),
        permit_amount=int.from_bytes(amount, "big"),
        signature=raw[_HEADER_SIZE:],
    )


class CirclePermitPaymaster:
    """
    Paymaster-data provider paying gas in an EIP-2612 token.

    Each call signs a fresh permit granting ``permit_amount`` to the
    paymaster and returns the fields to merge into the user operation.

    Args:
        client:             Chain client (see ``ChainClient``).
        account:            Owner signer (see ``LocalSigner``).
        token_address:      Token the gas is paid in (USDC).
        paymaster_address:  Paymaster contract; also the permit spender.
        permit_amount:      Allowance per user operation, smallest units.
        verification_gas_limit: ``paymasterVerificationGasLimit``.
        post_op_gas_limit:  ``paymasterPostOpGasLimit``.
    """

    def __init__(
        self,
        *,
        client,
        account,
        token_address: str,
        paymaster_address: str,
        permit_amount: int = 10_000_000,
        verification_gas_limit: int = 200_000,
        post_op_gas_limit: int = 15_000,
    ):
        self.client = client
        self.account = account
        self.token_address = AsyncWeb3.to_checksum_address(token_address)
        self.paymaster_address = AsyncWeb3.to_checksum_address(paymaster_address)
        self.permit_amount = permit_amount
        self.verification_gas_limit = verification_gas_limit
        self.post_op_gas_limit = post_op_gas_limit

    async def get_paymaster_data(self) -> PaymasterFields:
        signature = await sign_permit(
            token_address=self.token_address,
            client=self.client,
            account=self.account,
            spender_address=self.paymaster_address,
            permit_amount=self.permit_amount,
        )
        data = encode_paymaster_data(
            token=self.token_address,
            permit_amount=self.permit_amount,
            signature=signature,
        )
        logger.info(
            "Paymaster data prepared: paymaster=%s token=%s amount=%s",
            self.paymaster_address, self.token_address, self.permit_amount,
        )
        return PaymasterFields(
            paymaster=self.paymaster_address,
            paymaster_data="0x" + data.hex(),
            paymaster_verification_gas_limit=self.verification_gas_limit,
            paymaster_post_op_gas_limit=self.post_op_gas_limit,
            is_final=True,
        )
