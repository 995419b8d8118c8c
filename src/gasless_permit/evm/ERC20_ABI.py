"""
ERC-20, EIP-2612 and ERC-1271 Contract ABI Module

Minimal ABI fragments for the contract calls the permit flow needs.

Usage:
    from gasless_permit.evm.ERC20_ABI import (
        get_eip2612_abi,
        get_balance_abi,
        get_transfer_abi,
        get_erc1271_abi,
    )

    # Read name / version / nonces for permit typed data
    permit_abi = get_eip2612_abi()

    # Query balance
    balance_abi = get_balance_abi()
"""

from typing import Dict, Any, List


def get_balance_abi() -> List[Dict[str, Any]]:
    """
    Get ABI for querying an ERC-20 token balance.

    Returns:
        List[Dict[str, Any]]: ABI for balanceOf function

    Example:
        abi = get_balance_abi()
        # Use with web3.py: web3.eth.contract(address=token_address, abi=abi)
        # Call: contract.functions.balanceOf(address).call()
    """
    return [
        {
            "name": "balanceOf",
            "type": "function",
            "stateMutability": "view",
            "inputs": [{"name": "account", "type": "address"}],
            "outputs": [{"name": "", "type": "uint256"}],
        }
    ]


def get_transfer_abi() -> List[Dict[str, Any]]:
    """
    Get ABI for ERC-20 `transfer(to, amount)`.

    Used to encode the call a sponsored user operation executes.
    """
    return [
        {
            "name": "transfer",
            "type": "function",
            "stateMutability": "nonpayable",
            "inputs": [
                {"name": "to", "type": "address"},
                {"name": "amount", "type": "uint256"},
            ],
            "outputs": [{"name": "", "type": "bool"}],
        }
    ]


def get_eip2612_abi() -> List[Dict[str, Any]]:
    """
    Get ABI for the EIP-2612 view functions read when building a permit.

    Covers ``name()``, ``version()`` and ``nonces(owner)``.  ``version()`` is
    not part of ERC-20; tokens without it cannot be used with this flow.

    Example:
        abi = get_eip2612_abi()
        contract = web3.eth.contract(address=token_address, abi=abi)
        nonce = contract.functions.nonces(owner).call()
    """
    return [
        {
            "name": "name",
            "type": "function",
            "stateMutability": "view",
            "inputs": [],
            "outputs": [{"name": "", "type": "string"}],
        },
        {
            "name": "version",
            "type": "function",
            "stateMutability": "view",
            "inputs": [],
            "outputs": [{"name": "", "type": "string"}],
        },
        {
            "name": "nonces",
            "type": "function",
            "stateMutability": "view",
            "inputs": [{"name": "owner", "type": "address"}],
            "outputs": [{"name": "", "type": "uint256"}],
        },
    ]


def get_erc1271_abi() -> List[Dict[str, Any]]:
    """
    Get ABI for ERC-1271 ``isValidSignature(bytes32 hash, bytes signature)``.

    A smart-contract account returns ``0x1626ba7e`` when it accepts the
    signature for ``hash``.
    """
    return [
        {
            "name": "isValidSignature",
            "type": "function",
            "stateMutability": "view",
            "inputs": [
                {"name": "hash", "type": "bytes32"},
                {"name": "signature", "type": "bytes"},
            ],
            "outputs": [{"name": "magicValue", "type": "bytes4"}],
        }
    ]
