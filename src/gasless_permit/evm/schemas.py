"""
EVM Schema Models

Pydantic models exchanged between the permit signer, the paymaster and
whatever bundler client submits the user operation.

    - PaymasterPermitData: decoded ``[mode][token][amount][signature]`` layout.
    - PaymasterFields: paymaster section of an ERC-4337 v0.7 user operation.
    - SignedAuthorization: EIP-7702 authorization tuple signed by the owner.
"""

import json
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class CanonicalModel(BaseModel):
    """
    Pydantic base model with canonical JSON serialization.

    Keys are sorted and whitespace removed so the JSON form is deterministic.
    """

    model_config = ConfigDict(populate_by_name=True)

    def to_canonical_json(self) -> str:
        data = self.model_dump(mode="json", by_alias=True)
        return json.dumps(data, separators=(",", ":"), sort_keys=True, ensure_ascii=False)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class PaymasterPermitData(CanonicalModel):
    """
    Paymaster authorization data for permit-based gas payment.

    Packed on the wire as ``[1-byte mode][20-byte token][32-byte amount][signature]``.

    Attributes:
        mode: Payment mode byte; ``0`` selects EIP-2612 permit.
        token: ERC-20 token the paymaster charges gas in.
        permit_amount: Allowance granted by the permit, in smallest units.
        signature: Raw (unwrapped) permit signature.
    """

    mode: int = Field(default=0, ge=0, le=255, description="Paymaster mode byte")
    token: str = Field(..., description="Token contract address")
    permit_amount: int = Field(..., ge=0, lt=2**256, description="Permit allowance (uint256)")
    signature: bytes = Field(..., description="Raw permit signature")

    @field_serializer("signature", when_used="json")
    def serialize_signature(self, signature: bytes) -> str:
        return "0x" + signature.hex()


class PaymasterFields(CanonicalModel):
    """
    Paymaster fields of an ERC-4337 v0.7 user operation.

    Field aliases follow the bundler JSON-RPC naming so that
    ``to_dict()`` can be merged into a user operation directly.
    """

    paymaster: str = Field(..., description="Paymaster contract address")
    paymaster_data: str = Field(..., alias="paymasterData", description="0x-hex paymaster data")
    paymaster_verification_gas_limit: int = Field(
        default=200_000, alias="paymasterVerificationGasLimit"
    )
    paymaster_post_op_gas_limit: int = Field(default=15_000, alias="paymasterPostOpGasLimit")
    is_final: bool = Field(default=True, alias="isFinal")


class SignedAuthorization(CanonicalModel):
    """
    EIP-7702 authorization signed by the account owner.

    Delegates the owner's EOA to a smart-account implementation so the
    bundler can execute user operations for it.
    """

    chain_id: int = Field(..., alias="chainId")
    address: str = Field(..., description="Delegation target (smart-account implementation)")
    nonce: int = Field(..., ge=0)
    y_parity: int = Field(..., alias="yParity", ge=0, le=1)
    r: int
    s: int
