from gasless_permit import setup_logger
from gasless_permit.evm import (
    ChainClient,
    ChainInfo,
    LocalSigner,
    encode_paymaster_data,
    get_asset_config,
    get_chain_config,
    get_private_key_from_env,
    get_rpc_url,
    sign_permit,
)

caip2 = "eip155:421614"  # Arbitrum Sepolia
permit_amount = 10_000_000  # 10 USDC
min_balance = 1_000_000  # 1 USDC

setup_logger("DEBUG")


async def main():
    chain = get_chain_config(caip2)
    usdc = get_asset_config(caip2, "USDC")

    client = ChainClient.from_rpc_url(get_rpc_url(caip2), ChainInfo(id=chain.chain_id, name=chain.name))
    account = LocalSigner.from_key(get_private_key_from_env())

    balance = await client.get_erc20_balance(usdc.address, account.address)
    if balance < min_balance:
        print(
            f"Fund {account.address} with USDC on {chain.name} "
            "using https://faucet.circle.com, then run this again."
        )
        return None

    signature = await sign_permit(
        token_address=usdc.address,
        client=client,
        account=account,
        spender_address=chain.paymaster_address,
        permit_amount=permit_amount,
    )
    paymaster_data = encode_paymaster_data(
        token=usdc.address,
        permit_amount=permit_amount,
        signature=signature,
    )
    return signature, paymaster_data


if __name__ == "__main__":
    import asyncio
    result = asyncio.run(main())
    if result is None:
        raise SystemExit(1)
    signature, paymaster_data = result
    print("Permit signature:", "0x" + signature.hex())
    print("Paymaster data:", "0x" + paymaster_data.hex())
