#!/usr/bin/env python3
"""
Simple example of using the Megapot SDK.
"""
import logging
import os

from megapot_sdk import MegapotClient, MegapotConfig, MegapotError, PrivateKeyWallet, format_units
from megapot_sdk.constants import USDC_DECIMALS


def main():
    """
    Demonstrate basic usage of the MegapotClient.

    This example shows how to:
    1. Initialize the client from environment variables
    2. Inspect the wallet's USDC allowances
    3. Buy solo tickets, approving USDC first when needed
    """
    logging.basicConfig(level=logging.INFO)

    PRIVATE_KEY = os.environ.get("PRIVATE_KEY")
    TICKETS = int(os.environ.get("TICKETS", "1"))

    if not PRIVATE_KEY:
        print("ERROR: PRIVATE_KEY environment variable is required")
        return

    # MEGAPOT_RPC_URL, PAYMASTER_URL and friends are picked up here
    config = MegapotConfig.from_env()
    client = MegapotClient(
        config=config,
        wallet=PrivateKeyWallet(PRIVATE_KEY),
        on_transition=lambda state: print(f"  -> {state.value}")
    )
    print(f"Wallet: {client.address}")

    try:
        for row in client.get_user_allowances():
            print(f"Allowance {row.token}: {format_units(row.remaining, USDC_DECIMALS)} USDC")

        result = client.buy_solo_tickets(TICKETS)

        print("Tickets purchased successfully!")
        print(f"Transaction hash: {result.tx_hash}")
        print(f"Cost: {format_units(result.cost_in_smallest_unit, USDC_DECIMALS)} USDC")
        print(f"Sponsored: {result.sponsored}")
        print(f"Explorer: {result.receipt_url}")

    except MegapotError as e:
        print(f"Error buying tickets: {str(e)}")


if __name__ == "__main__":
    main()
