#!/usr/bin/env python3
"""
Read-only example: current jackpot state and the latest settled round.
"""
import os
from datetime import datetime, timezone

from megapot_sdk import MegapotClient, MegapotError, format_units
from megapot_sdk.constants import USDC_DECIMALS


def main():
    client = MegapotClient(rpc_url=os.environ.get("MEGAPOT_RPC_URL"))
    jackpot = client.jackpot

    try:
        print(f"Jackpot: {format_units(jackpot.jackpot_amount(), USDC_DECIMALS)} USDC")
        print(f"Ticket price: {format_units(jackpot.ticket_price(), USDC_DECIMALS)} USDC")
        print(f"Round ends in: {int(jackpot.time_remaining())} seconds")
        odds = jackpot.jackpot_odds()
        if odds is not None:
            print(f"Odds per ticket: 1 in {odds:.0f}")

        event = client.get_last_jackpot_results()
        if event is None:
            print("No jackpot settled in the last day")
            return

        settled_at = datetime.fromtimestamp(event.timestamp, tz=timezone.utc)
        print(f"Last round settled {settled_at:%Y-%m-%d %H:%M} UTC in block {event.block_number}")
        print(f"Winner: {event.winner_address}")
        print(f"Amount: {format_units(event.win_amount, USDC_DECIMALS)} USDC")

    except MegapotError as e:
        print(f"Error reading jackpot: {str(e)}")


if __name__ == "__main__":
    main()
