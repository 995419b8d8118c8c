"""
Chain and Signer Collaborators

Thin async wrappers over ``web3.py`` and ``eth_account`` exposing exactly
the capabilities the permit flow consumes:

    - ChainClient: chain identity, token handles, typed-data verification,
      transaction count and ERC-20 balance reads.
    - EIP2612Token: ``name()``, ``version()`` and ``nonces(owner)`` reads.
    - LocalSigner: a key held in-process that signs typed data and
      EIP-7702 authorizations.
    - encode_transfer_call: the ERC-20 ``transfer`` call a sponsored user
      operation executes.

Any object offering the same attributes and coroutines can stand in for
these classes (e.g. a remote or hardware signer).
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from eth_abi import encode
from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_utils import function_abi_to_4byte_selector
from web3 import AsyncWeb3

from ..utils import logger
from ..engine.exceptions import ContractReadError, SigningError
from .ERC20_ABI import get_balance_abi, get_eip2612_abi, get_transfer_abi
from .erc6492 import SignatureLike
from .schemas import SignedAuthorization
from .standards import EIP2612TypedData
from .verifies import verify_typed_data


@dataclass(frozen=True)
class ChainInfo:
    """Chain identity as seen by the permit flow."""
    id: int
    name: str = ""


async def _call_view(contract, method: str, *args: Any) -> Any:
    try:
        return await getattr(contract.functions, method)(*args).call()
    except Exception as exc:
        raise ContractReadError(
            f"Failed to read {method}() from {contract.address}: {exc}",
            address=contract.address,
            method=method,
        ) from exc


def encode_transfer_call(*, token: str, recipient: str, value: int) -> Dict[str, Any]:
    """
    Build the ``{to, value, data}`` call for ``token.transfer(recipient, value)``.

    The returned dict is what a smart account batches into a user operation.
    """
    if not 0 <= value < 2**256:
        raise ValueError(f"Transfer value out of uint256 range: {value}")

    (fn_abi,) = get_transfer_abi()
    arg_types = [arg["type"] for arg in fn_abi["inputs"]]
    data = function_abi_to_4byte_selector(fn_abi) + encode(
        arg_types, [AsyncWeb3.to_checksum_address(recipient), value]
    )
    return {
        "to": AsyncWeb3.to_checksum_address(token),
        "value": 0,
        "data": "0x" + data.hex(),
    }


class EIP2612Token:
    """
    Read-only handle on an EIP-2612 token contract.

    Args:
        w3: ``AsyncWeb3`` connected to the token's chain.
        address: Token contract address (any case).
        abi: Override ABI; defaults to ``get_eip2612_abi()``.
    """

    def __init__(self, w3: AsyncWeb3, address: str, abi: Optional[List[Dict[str, Any]]] = None):
        self.address = AsyncWeb3.to_checksum_address(address)
        self._contract = w3.eth.contract(address=self.address, abi=abi or get_eip2612_abi())

    async def name(self) -> str:
        return await _call_view(self._contract, "name")

    async def version(self) -> str:
        return await _call_view(self._contract, "version")

    async def nonces(self, owner: str) -> int:
        return int(await _call_view(self._contract, "nonces", AsyncWeb3.to_checksum_address(owner)))


class ChainClient:
    """
    Read-only chain access for one network.

    Args:
        w3: ``AsyncWeb3`` instance.
        chain: ``ChainInfo`` for the connected network.
    """

    def __init__(self, w3: AsyncWeb3, chain: ChainInfo):
        self.w3 = w3
        self.chain = chain

    @classmethod
    def from_rpc_url(cls, rpc_url: str, chain: ChainInfo, timeout: float = 10.0) -> "ChainClient":
        w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))
        return cls(w3, chain)

    def get_token(self, address: str) -> EIP2612Token:
        return EIP2612Token(self.w3, address)

    async def verify_typed_data(
        self,
        payload: EIP2612TypedData,
        address: str,
        signature: SignatureLike,
    ) -> bool:
        """Verify a typed-data signature (ECDSA, then ERC-1271 via this client's provider)."""
        return await verify_typed_data(payload, address, signature, w3=self.w3)

    async def get_transaction_count(self, address: str) -> int:
        checksum = AsyncWeb3.to_checksum_address(address)
        try:
            return int(await self.w3.eth.get_transaction_count(checksum))
        except Exception as exc:
            raise ContractReadError(
                f"Failed to read transaction count of {checksum}: {exc}",
                address=checksum,
                method="eth_getTransactionCount",
            ) from exc

    async def get_erc20_balance(self, token: str, owner: str) -> int:
        contract = self.w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(token), abi=get_balance_abi()
        )
        return int(await _call_view(contract, "balanceOf", AsyncWeb3.to_checksum_address(owner)))


class LocalSigner:
    """
    Signer backed by an in-process ``eth_account`` key.

    The private key never leaves the wrapped ``LocalAccount`` and never
    appears in errors or logs.
    """

    def __init__(self, account: LocalAccount):
        self._account = account

    @classmethod
    def from_key(cls, private_key: str) -> "LocalSigner":
        try:
            return cls(Account.from_key(private_key))
        except Exception as exc:
            # Never echo the key.
            raise SigningError(f"Invalid private key: {type(exc).__name__}") from None

    @property
    def address(self) -> str:
        return self._account.address

    async def sign_typed_data(self, payload: EIP2612TypedData) -> bytes:
        """Sign EIP-712 ``payload``; returns the 65-byte ``r || s || v`` signature."""
        try:
            signed = self._account.sign_typed_data(full_message=payload.to_signable_dict())
        except Exception as exc:
            raise SigningError(
                f"Failed to sign typed data for {self.address}: {exc}",
                address=self.address,
            ) from exc
        return bytes(signed.signature)

    async def sign_authorization(
        self,
        *,
        chain_id: int,
        nonce: int,
        contract_address: str,
    ) -> SignedAuthorization:
        """Sign an EIP-7702 authorization delegating this EOA to ``contract_address``."""
        try:
            signed = self._account.sign_authorization(
                {
                    "chainId": chain_id,
                    "address": AsyncWeb3.to_checksum_address(contract_address),
                    "nonce": nonce,
                }
            )
        except Exception as exc:
            raise SigningError(
                f"Failed to sign authorization for {self.address}: {exc}",
                address=self.address,
            ) from exc

        logger.debug("Signed EIP-7702 authorization: chain=%s nonce=%s", chain_id, nonce)
        return SignedAuthorization(
            chain_id=signed.chain_id,
            address=AsyncWeb3.to_checksum_address(signed.address),
            nonce=signed.nonce,
            y_parity=signed.y_parity,
            r=signed.r,
            s=signed.s,
        )
