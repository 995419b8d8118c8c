"""
EVM Chain Configuration Management

Provides unified access to the chains, tokens and ERC-4337 infrastructure
addresses used by the gasless permit flow.  Includes environment-aware
loading of the owner key, recipient and RPC override, plus the canonical
amount <-> smallest-unit conversions.
"""

import os
from typing import Dict, Optional
from decimal import Decimal, InvalidOperation
from pydantic import BaseModel, Field

import dotenv

from ..engine.exceptions import ConfigurationError

dotenv.load_dotenv()

#: Largest uint256; used as the "never expires" permit deadline.
MAX_UINT256: int = 2**256 - 1

#: EntryPoint v0.7, same address on every supported chain.
ENTRYPOINT_V07: str = "0x0000000071727De22E5E9d8BAf0edAc6f37da032"

#: Paymaster data mode byte selecting EIP-2612 permit payment.
PAYMASTER_MODE_PERMIT: int = 0

#: Magic value returned by a valid ERC-1271 ``isValidSignature`` call.
ERC1271_MAGIC_VALUE: bytes = b"\x16\x26\xba\x7e"

#: 32-byte suffix marking an ERC-6492 wrapped signature.
ERC6492_MAGIC_SUFFIX: bytes = bytes.fromhex("64926492" * 8)

DEFAULT_CAIP2 = "eip155:421614"


class EvmAssetConfig(BaseModel):
    """EIP-2612 token deployed on a configured chain."""
    symbol: str
    address: str = Field(..., description="Checksummed token contract")
    name: str = Field(..., description="EIP-712 domain name, as returned by name()")
    decimals: int = Field(..., ge=0)
    version: str = Field(..., description="EIP-712 domain version, as returned by version()")


class EvmChainConfig(BaseModel):
    """Chain reachable by the gasless flow, with its ERC-4337 infrastructure."""
    caip2: str
    chain_id: int
    name: str
    public_rpc_url: str
    explorer_url: str
    paymaster_address: str = Field(..., description="Circle paymaster (v0.7); also the permit spender")
    entrypoint_address: str = Field(default=ENTRYPOINT_V07)
    bundler_url: Optional[str] = Field(default=None, description="Public bundler JSON-RPC endpoint")
    assets: Dict[str, EvmAssetConfig] = Field(default_factory=dict)


# Keyed by CAIP-2 identifier
_EVM_CHAINS_DATA: Dict = {
    "eip155:421614": {
      "name": "Arbitrum Sepolia",
      "public_rpc_url": "https://sepolia-rollup.arbitrum.io/rpc",
      "explorer_url": "https://sepolia.arbiscan.io",
      "paymaster_address": "0x3BA9A96eE3eFf3A69E2B18886AcF52027EFF8966",
      "bundler_url": "https://public.pimlico.io/v2/421614/rpc",
      "assets": {
        "USDC": {
          "address": "0x75faf114eafb1BDbe2F0316DF893fd58CE46AA4d",
          "name": "USD Coin",
          "decimals": 6,
          "version": "2"
        }
      }
    },
    "eip155:11155111": {
      "name": "Sepolia Testnet",
      "public_rpc_url": "https://rpc.sepolia.org",
      "explorer_url": "https://sepolia.etherscan.io",
      "paymaster_address": "0x3BA9A96eE3eFf3A69E2B18886AcF52027EFF8966",
      "bundler_url": "https://public.pimlico.io/v2/11155111/rpc",
      "assets": {
        "USDC": {
          "address": "0x1c7D4B196Cb0C7B01d743Fbc6116a902379C7238",
          "name": "USDC",
          "decimals": 6,
          "version": "2"
        }
      }
    },
}


def _parse_caip2_eip155_chain_id(caip2: str) -> int:
    """
    Chain id from an ``eip155:<id>`` (or ``eip155-<id>``) CAIP-2 identifier.

    Raises:
        ConfigurationError: If ``caip2`` is not an eip155 identifier with a
            positive integer reference.
    """
    if not isinstance(caip2, str):
        raise ConfigurationError(f"CAIP-2 identifier must be a string, got {type(caip2).__name__}")

    namespace, sep, reference = caip2.strip().replace("-", ":", 1).partition(":")
    if namespace != "eip155" or not sep or not reference.isdigit():
        raise ConfigurationError(f"Not an eip155 CAIP-2 identifier: {caip2!r}")

    chain_id = int(reference)
    if chain_id == 0:
        raise ConfigurationError(f"Chain id must be positive in {caip2!r}")
    return chain_id


def get_chain_config(caip2: str = DEFAULT_CAIP2) -> EvmChainConfig:
    """
    Return the configuration of a built-in chain.

    Args:
        caip2: CAIP-2 identifier, e.g. ``"eip155:421614"`` (Arbitrum Sepolia).

    Raises:
        ConfigurationError: If the identifier is malformed or the chain is
            not configured.
    """
    chain_id = _parse_caip2_eip155_chain_id(caip2)
    key = f"eip155:{chain_id}"
    data = _EVM_CHAINS_DATA.get(key)
    if data is None:
        raise ConfigurationError(
            f"Unsupported chain {caip2}. Configured chains: {sorted(_EVM_CHAINS_DATA)}"
        )

    assets = {
        symbol: EvmAssetConfig(symbol=symbol, **asset)
        for symbol, asset in data["assets"].items()
    }
    fields = {k: v for k, v in data.items() if k != "assets"}
    return EvmChainConfig(caip2=key, chain_id=chain_id, assets=assets, **fields)


def get_asset_config(caip2: str, symbol: str) -> EvmAssetConfig:
    """Look up a token on a configured chain by symbol (case-insensitive)."""
    config = get_chain_config(caip2)
    for asset_symbol, asset in config.assets.items():
        if asset_symbol.upper() == symbol.strip().upper():
            return asset
    raise ConfigurationError(
        f"Asset '{symbol}' is not configured on {config.caip2}. "
        f"Available: {sorted(config.assets)}"
    )


def get_rpc_url(caip2: str = DEFAULT_CAIP2) -> str:
    """
    RPC endpoint for ``caip2``: ``EVM_RPC_URL`` when set, otherwise the
    chain's public endpoint.
    """
    override = os.getenv("EVM_RPC_URL")
    if override and override.strip():
        return override.strip()
    return get_chain_config(caip2).public_rpc_url


def get_private_key_from_env(required: bool = True) -> Optional[str]:
    """
    Load the smart account owner's private key from ``OWNER_PRIVATE_KEY``.

    The private key should be stored securely in environment variables
    (or a git-ignored ``.env`` file) and never committed to version control.

    Raises:
        ConfigurationError: If ``required`` and the variable is unset.
    """
    key = os.getenv("OWNER_PRIVATE_KEY")
    if required and not key:
        raise ConfigurationError("OWNER_PRIVATE_KEY is not set")
    return key


def get_recipient_address_from_env(required: bool = True) -> Optional[str]:
    """
    Load the transfer / swap recipient from ``RECIPIENT_ADDRESS``.

    Raises:
        ConfigurationError: If ``required`` and the variable is unset.
    """
    address = os.getenv("RECIPIENT_ADDRESS")
    if required and not address:
        raise ConfigurationError("RECIPIENT_ADDRESS is not set")
    return address


def _as_decimal(value, label: str) -> Decimal:
    if isinstance(value, Decimal):
        number = value
    else:
        # str() keeps floats at their shortest repr (0.1, not 0.1000000000000000055...)
        try:
            number = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError) as exc:
            raise ValueError(f"Invalid {label}: {value!r}") from exc
    if not number.is_finite() or number < 0:
        raise ValueError(f"{label} must be a finite non-negative number, got {value!r}")
    return number


def _check_decimals(decimals: int) -> None:
    if not isinstance(decimals, int) or isinstance(decimals, bool) or decimals < 0:
        raise ValueError(f"decimals must be a non-negative int, got {decimals!r}")


def amount_to_value(*, amount: float | int | str | Decimal, decimals: int) -> int:
    """
    Human-readable token amount to integer smallest units.

    ``amount_to_value(amount="10", decimals=6) == 10_000_000``

    Raises:
        ValueError: On negative or non-numeric input, or when ``amount`` has
            more fractional digits than ``decimals``.
    """
    _check_decimals(decimals)
    scaled = _as_decimal(amount, "amount").scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"{amount!r} has more than {decimals} fractional digits")
    return int(scaled)


def value_to_amount(*, value: int | str | Decimal, decimals: int) -> Decimal:
    """Integer smallest units to a human-readable ``Decimal`` amount."""
    _check_decimals(decimals)
    number = _as_decimal(value, "value")
    if number != number.to_integral_value():
        raise ValueError(f"value must be a whole number of smallest units, got {value!r}")
    return number.scaleb(-decimals)
