#!/usr/bin/env python3
"""
Basic usage example for the Bitfinex client library.

Reads BITFINEX_API_KEY / BITFINEX_API_SECRET from the environment, then
walks through the order lifecycle: order book, submit, modify, cancel and
positions.
"""

import json
import logging
import sys

from bfx_client import BitfinexClient, BitfinexClientError, ConfigurationError, order_ids


def show(title, document):
    print(f"{title}: {json.dumps(document, indent=4)}")


def main():
    """Run the order lifecycle example."""

    logging.basicConfig(level=logging.INFO)

    try:
        client = BitfinexClient.from_env()
    except ConfigurationError as e:
        print(f"Configuration error: {e}")
        sys.exit(1)

    with client:
        try:
            # Example 1: Order book
            show("Orderbook", client.get_orderbook("tBTCUSD"))

            # Example 2: Place a new order
            new_order = client.place_order("tBTCUSD", 0.1, 50000)
            show("New Order", new_order)

            order_id = order_ids(new_order)[0]

            # Example 3: Modify the order
            show("Modified Order", client.modify_order(order_id, 51000))

            # Example 4: Cancel the order
            show("Cancelled Order", client.cancel_order(order_id))

            # Example 5: Positions
            show("Positions", client.get_positions())

        except BitfinexClientError as e:
            endpoint = getattr(e, 'endpoint', None)
            print(f"Error ({type(e).__name__}{', ' + endpoint if endpoint else ''}): {e}")
            sys.exit(1)


if __name__ == "__main__":
    main()
