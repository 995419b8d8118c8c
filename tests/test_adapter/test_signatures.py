"""
Permit Signing Test Suite

Tests for ``build_permit_payload`` and ``sign_permit``:
- Typed-data construction from token reads
- Never-expiring deadline and decimal-string encoding
- Error mapping for read, signing and verification failures
- ERC-6492 unwrapping of smart-account signatures

Usage:
    pytest tests/test_adapter/test_signatures.py -v
"""

import asyncio

import pytest
from eth_account import Account

from test_mocks import (
    MOCK_OWNER_ADDRESS,
    MOCK_OTHER_ADDRESS,
    MOCK_PAYMASTER_ADDRESS,
    MOCK_USDC_ARBITRUM_SEPOLIA,
    MOCK_CHAIN_ID_ARBITRUM_SEPOLIA,
    MOCK_TOKEN_NAME,
    MOCK_TOKEN_VERSION,
    MOCK_AMOUNT_10_USDC,
    MOCK_NONCE_FIVE,
    MAX_UINT256_DECIMAL,
    MockWeb3Provider,
    MockToken,
    ImpostorSigner,
    FailingSigner,
    ScriptedSigner,
    ERC6492WrappingSigner,
    create_chain_client,
    create_owner_signer,
)

from gasless_permit.evm.clients import ChainInfo
from gasless_permit.evm.constants import MAX_UINT256
from gasless_permit.evm.signatures import build_permit_payload, sign_permit
from gasless_permit.evm.verifies import typed_data_signable
from gasless_permit.engine.exceptions import (
    ContractReadError,
    InvalidSignatureError,
    SigningError,
)


ARBITRUM_SEPOLIA = ChainInfo(id=MOCK_CHAIN_ID_ARBITRUM_SEPOLIA, name="Arbitrum Sepolia")


class TestBuildPermitPayload:
    """Typed-data construction."""

    @pytest.mark.asyncio
    async def test_usd_coin_scenario(self):
        token = MockToken(name="USD Coin", version="2", nonce=0)

        payload = await build_permit_payload(
            token=token,
            chain=ARBITRUM_SEPOLIA,
            owner_address=MOCK_OWNER_ADDRESS,
            spender_address=MOCK_PAYMASTER_ADDRESS,
            value=10000000,
        )

        assert payload.to_dict()["message"] == {
            "owner": MOCK_OWNER_ADDRESS,
            "spender": MOCK_PAYMASTER_ADDRESS,
            "value": "10000000",
            "nonce": "0",
            "deadline": MAX_UINT256_DECIMAL,
        }
        assert payload.to_dict()["domain"] == {
            "name": "USD Coin",
            "version": "2",
            "chainId": 421614,
            "verifyingContract": MOCK_USDC_ARBITRUM_SEPOLIA,
        }
        assert payload.to_dict()["primaryType"] == "Permit"

    @pytest.mark.asyncio
    async def test_verifying_contract_is_token_address(self):
        token = MockToken(address="0x1c7D4B196Cb0C7B01d743Fbc6116a902379C7238")

        payload = await build_permit_payload(
            token=token,
            chain=ARBITRUM_SEPOLIA,
            owner_address=MOCK_OWNER_ADDRESS,
            spender_address=MOCK_PAYMASTER_ADDRESS,
            value=1,
        )

        assert payload.domain.verifyingContract == token.address

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", [0, 1, MOCK_AMOUNT_10_USDC, MAX_UINT256])
    async def test_deadline_is_always_max_uint256(self, value):
        payload = await build_permit_payload(
            token=MockToken(),
            chain=ARBITRUM_SEPOLIA,
            owner_address=MOCK_OWNER_ADDRESS,
            spender_address=MOCK_PAYMASTER_ADDRESS,
            value=value,
        )

        assert payload.message.deadline == MAX_UINT256_DECIMAL
        assert int(payload.message.deadline) == MAX_UINT256
        assert payload.message.value == str(value)

    @pytest.mark.asyncio
    async def test_nonce_string_matches_read_nonce(self):
        nonce = 2**64 + 12345
        token = MockToken(nonce=nonce)

        payload = await build_permit_payload(
            token=token,
            chain=ARBITRUM_SEPOLIA,
            owner_address=MOCK_OWNER_ADDRESS,
            spender_address=MOCK_PAYMASTER_ADDRESS,
            value=1,
        )

        assert int(payload.message.nonce) == nonce
        assert token.nonce_requests == [MOCK_OWNER_ADDRESS]

    @pytest.mark.asyncio
    async def test_payload_is_deterministic(self):
        kwargs = dict(
            chain=ARBITRUM_SEPOLIA,
            owner_address=MOCK_OWNER_ADDRESS,
            spender_address=MOCK_PAYMASTER_ADDRESS,
            value=MOCK_AMOUNT_10_USDC,
        )

        first = await build_permit_payload(token=MockToken(nonce=MOCK_NONCE_FIVE), **kwargs)
        second = await build_permit_payload(token=MockToken(nonce=MOCK_NONCE_FIVE), **kwargs)

        assert first == second
        assert first.to_dict() == second.to_dict()
        assert typed_data_signable(first) == typed_data_signable(second)

    @pytest.mark.asyncio
    async def test_type_field_order_is_preserved(self):
        payload = await build_permit_payload(
            token=MockToken(),
            chain=ARBITRUM_SEPOLIA,
            owner_address=MOCK_OWNER_ADDRESS,
            spender_address=MOCK_PAYMASTER_ADDRESS,
            value=1,
        )

        assert [f["name"] for f in payload.types["Permit"]] == [
            "owner", "spender", "value", "nonce", "deadline",
        ]
        assert [f["name"] for f in payload.types["EIP712Domain"]] == [
            "name", "version", "chainId", "verifyingContract",
        ]

    @pytest.mark.asyncio
    async def test_signable_dict_uses_integers(self):
        payload = await build_permit_payload(
            token=MockToken(nonce=3),
            chain=ARBITRUM_SEPOLIA,
            owner_address=MOCK_OWNER_ADDRESS,
            spender_address=MOCK_PAYMASTER_ADDRESS,
            value=42,
        )

        message = payload.to_signable_dict()["message"]
        assert message["value"] == 42
        assert message["nonce"] == 3
        assert message["deadline"] == MAX_UINT256
        assert message["owner"] == MOCK_OWNER_ADDRESS

    @pytest.mark.asyncio
    @pytest.mark.parametrize("failing", ["name", "version", "nonce"])
    async def test_read_failure_raises_contract_read_error(self, failing):
        kwargs = {failing: ConnectionError("RPC unavailable")}
        token = MockToken(**kwargs)

        with pytest.raises(ContractReadError) as exc_info:
            await build_permit_payload(
                token=token,
                chain=ARBITRUM_SEPOLIA,
                owner_address=MOCK_OWNER_ADDRESS,
                spender_address=MOCK_PAYMASTER_ADDRESS,
                value=1,
            )

        assert exc_info.value.address == token.address
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    @pytest.mark.asyncio
    async def test_token_without_version_raises_contract_read_error(self):
        w3 = MockWeb3Provider()
        del w3.responses["version"]
        client = create_chain_client(w3)

        with pytest.raises(ContractReadError) as exc_info:
            await build_permit_payload(
                token=client.get_token(MOCK_USDC_ARBITRUM_SEPOLIA),
                chain=client.chain,
                owner_address=MOCK_OWNER_ADDRESS,
                spender_address=MOCK_PAYMASTER_ADDRESS,
                value=1,
            )

        assert exc_info.value.method == "version"

    @pytest.mark.asyncio
    async def test_value_out_of_range_rejected(self):
        with pytest.raises(ValueError):
            await build_permit_payload(
                token=MockToken(),
                chain=ARBITRUM_SEPOLIA,
                owner_address=MOCK_OWNER_ADDRESS,
                spender_address=MOCK_PAYMASTER_ADDRESS,
                value=MAX_UINT256 + 1,
            )


class TestSignPermit:
    """End-to-end permit signing against a mock chain."""

    @pytest.mark.asyncio
    async def test_returns_verified_raw_signature(self):
        w3 = MockWeb3Provider(mock_nonce=MOCK_NONCE_FIVE)
        client = create_chain_client(w3)
        account = create_owner_signer()

        signature = await sign_permit(
            token_address=MOCK_USDC_ARBITRUM_SEPOLIA,
            client=client,
            account=account,
            spender_address=MOCK_PAYMASTER_ADDRESS,
            permit_amount=MOCK_AMOUNT_10_USDC,
        )

        assert isinstance(signature, bytes)
        assert len(signature) == 65
        assert signature[-1] in (27, 28)

        payload = await build_permit_payload(
            token=client.get_token(MOCK_USDC_ARBITRUM_SEPOLIA),
            chain=client.chain,
            owner_address=account.address,
            spender_address=MOCK_PAYMASTER_ADDRESS,
            value=MOCK_AMOUNT_10_USDC,
        )
        recovered = Account.recover_message(typed_data_signable(payload), signature=signature)
        assert recovered == MOCK_OWNER_ADDRESS

    @pytest.mark.asyncio
    async def test_reads_nonce_of_signer(self):
        w3 = MockWeb3Provider()
        client = create_chain_client(w3)

        await sign_permit(
            token_address=MOCK_USDC_ARBITRUM_SEPOLIA,
            client=client,
            account=create_owner_signer(),
            spender_address=MOCK_PAYMASTER_ADDRESS,
            permit_amount=MOCK_AMOUNT_10_USDC,
        )

        nonce_calls = [
            args for contract in w3.contracts
            for name, args in contract.functions.calls if name == "nonces"
        ]
        assert nonce_calls == [(MOCK_OWNER_ADDRESS,)]

    @pytest.mark.asyncio
    async def test_wrong_key_raises_invalid_signature(self):
        client = create_chain_client()

        with pytest.raises(InvalidSignatureError) as exc_info:
            await sign_permit(
                token_address=MOCK_USDC_ARBITRUM_SEPOLIA,
                client=client,
                account=ImpostorSigner(address=MOCK_OWNER_ADDRESS),
                spender_address=MOCK_PAYMASTER_ADDRESS,
                permit_amount=MOCK_AMOUNT_10_USDC,
            )

        assert exc_info.value.signer == MOCK_OWNER_ADDRESS
        assert exc_info.value.signature.startswith("0x")
        assert MOCK_OWNER_ADDRESS in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_verification_false_returns_nothing(self):
        class RejectingClient:
            def __init__(self, inner):
                self.chain = inner.chain
                self._inner = inner
                self.verify_calls = []

            def get_token(self, address):
                return self._inner.get_token(address)

            async def verify_typed_data(self, payload, address, signature):
                self.verify_calls.append((payload, address, signature))
                return False

        client = RejectingClient(create_chain_client())
        account = create_owner_signer()

        with pytest.raises(InvalidSignatureError):
            await sign_permit(
                token_address=MOCK_USDC_ARBITRUM_SEPOLIA,
                client=client,
                account=account,
                spender_address=MOCK_PAYMASTER_ADDRESS,
                permit_amount=1,
            )

        assert len(client.verify_calls) == 1
        _, address, signature = client.verify_calls[0]
        assert address == account.address
        assert len(signature) == 65

    @pytest.mark.asyncio
    async def test_signer_failure_raises_signing_error(self):
        with pytest.raises(SigningError) as exc_info:
            await sign_permit(
                token_address=MOCK_USDC_ARBITRUM_SEPOLIA,
                client=create_chain_client(),
                account=FailingSigner(),
                spender_address=MOCK_PAYMASTER_ADDRESS,
                permit_amount=1,
            )

        assert exc_info.value.address == MOCK_OWNER_ADDRESS
        assert "User rejected" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_signing_error_passes_through_unchanged(self):
        original = SigningError("key locked", address=MOCK_OTHER_ADDRESS)

        with pytest.raises(SigningError) as exc_info:
            await sign_permit(
                token_address=MOCK_USDC_ARBITRUM_SEPOLIA,
                client=create_chain_client(),
                account=FailingSigner(error=original),
                spender_address=MOCK_PAYMASTER_ADDRESS,
                permit_amount=1,
            )

        assert exc_info.value is original

    @pytest.mark.asyncio
    @pytest.mark.parametrize("result", [None, "0xnothex", 12345])
    async def test_unusable_signer_output_raises_signing_error(self, result):
        with pytest.raises(SigningError) as exc_info:
            await sign_permit(
                token_address=MOCK_USDC_ARBITRUM_SEPOLIA,
                client=create_chain_client(),
                account=ScriptedSigner(result),
                spender_address=MOCK_PAYMASTER_ADDRESS,
                permit_amount=1,
            )

        assert exc_info.value.address == MOCK_OWNER_ADDRESS

    @pytest.mark.asyncio
    async def test_rpc_failure_during_contract_fallback_raises_contract_read_error(self):
        w3 = MockWeb3Provider()
        w3.eth.get_code.side_effect = ConnectionError("rpc down")

        with pytest.raises(ContractReadError) as exc_info:
            await sign_permit(
                token_address=MOCK_USDC_ARBITRUM_SEPOLIA,
                client=create_chain_client(w3),
                account=ImpostorSigner(address=MOCK_OWNER_ADDRESS),
                spender_address=MOCK_PAYMASTER_ADDRESS,
                permit_amount=MOCK_AMOUNT_10_USDC,
            )

        assert exc_info.value.method == "eth_getCode"
        assert exc_info.value.address == MOCK_OWNER_ADDRESS

    @pytest.mark.asyncio
    async def test_read_failure_stops_before_signing(self):
        w3 = MockWeb3Provider(mock_nonce=TimeoutError("node timeout"))
        signer = FailingSigner(error=AssertionError("signer must not be reached"))

        with pytest.raises(ContractReadError):
            await sign_permit(
                token_address=MOCK_USDC_ARBITRUM_SEPOLIA,
                client=create_chain_client(w3),
                account=signer,
                spender_address=MOCK_PAYMASTER_ADDRESS,
                permit_amount=1,
            )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("as_hex", [False, True])
    async def test_erc6492_wrapper_is_stripped(self, as_hex):
        account = ERC6492WrappingSigner(as_hex=as_hex)

        signature = await sign_permit(
            token_address=MOCK_USDC_ARBITRUM_SEPOLIA,
            client=create_chain_client(),
            account=account,
            spender_address=MOCK_PAYMASTER_ADDRESS,
            permit_amount=MOCK_AMOUNT_10_USDC,
        )

        assert signature == account.last_inner_signature
        assert len(signature) == 65

    @pytest.mark.asyncio
    async def test_caller_can_bound_latency(self):
        client = create_chain_client()

        signature = await asyncio.wait_for(
            sign_permit(
                token_address=MOCK_USDC_ARBITRUM_SEPOLIA,
                client=client,
                account=create_owner_signer(),
                spender_address=MOCK_PAYMASTER_ADDRESS,
                permit_amount=MOCK_AMOUNT_10_USDC,
            ),
            timeout=5,
        )

        assert len(signature) == 65
