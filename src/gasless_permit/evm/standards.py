from dataclasses import dataclass, field
from typing import Dict, Any, List


# -----------------------------
# EIP-712 Domain
# -----------------------------

@dataclass(frozen=True)
class EIP712Domain:
    """
    EIP-712 domain separator.
    Used to prevent signature replay across domains.

    ``name`` and ``version`` must match what the token contract itself
    declares, otherwise the permit is rejected on-chain.
    """
    name: str
    version: str
    chainId: int
    verifyingContract: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "chainId": self.chainId,
            "verifyingContract": self.verifyingContract,
        }


# -----------------------------
# Permit Message (EIP-2612)
# -----------------------------

@dataclass(frozen=True)
class PermitMessage:
    """
    Permit message as defined in EIP-2612.

    Numeric fields are kept as decimal strings, the form typed-data signing
    APIs expect on the wire.  ``nonce`` must equal the owner's on-chain nonce
    at signing time.
    """
    owner: str
    spender: str
    value: str
    nonce: str
    deadline: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "owner": self.owner,
            "spender": self.spender,
            "value": self.value,
            "nonce": self.nonce,
            "deadline": self.deadline,
        }


def _eip2612_types() -> Dict[str, List[Dict[str, str]]]:
    # Field order is part of the type hash.
    return {
        # Required for compatibility with wallet Sign Typed Data APIs
        "EIP712Domain": [
            {"name": "name", "type": "string"},
            {"name": "version", "type": "string"},
            {"name": "chainId", "type": "uint256"},
            {"name": "verifyingContract", "type": "address"},
        ],
        "Permit": [
            {"name": "owner", "type": "address"},
            {"name": "spender", "type": "address"},
            {"name": "value", "type": "uint256"},
            {"name": "nonce", "type": "uint256"},
            {"name": "deadline", "type": "uint256"},
        ],
    }


# -----------------------------
# EIP-712 Typed Data Wrapper
# -----------------------------

@dataclass(frozen=True)
class EIP2612TypedData:
    """
    EIP-712 typed-data container for an EIP-2612 ``permit``.

    Attributes:
        domain: EIP712Domain instance describing the signing domain.
        message: PermitMessage carrying the payload.
        primary_type: The primary EIP-712 type, always ``"Permit"``.
        types: Ordered field lists per struct (automatically set).
    """
    domain: EIP712Domain
    message: PermitMessage

    primary_type: str = "Permit"

    types: Dict[str, List[Dict[str, str]]] = field(default_factory=_eip2612_types)

    def to_dict(self) -> Dict[str, Any]:
        """
        Wire form: { types, primaryType, domain, message } with numeric message
        fields as decimal strings.  Each call returns a fresh copy.
        """
        return {
            "types": {name: [dict(f) for f in fields] for name, fields in self.types.items()},
            "primaryType": self.primary_type,
            "domain": self.domain.to_dict(),
            "message": self.message.to_dict(),
        }

    def to_signable_dict(self) -> Dict[str, Any]:
        """
        Same payload with integer-typed message fields converted to ``int``.

        This is the form handed to ``eth_account`` for hashing and signing.
        """
        payload = self.to_dict()
        message = dict(payload["message"])
        for entry in self.types[self.primary_type]:
            if entry["type"].startswith(("uint", "int")):
                message[entry["name"]] = int(message[entry["name"]])
        payload["message"] = message
        return payload
