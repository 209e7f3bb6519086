"""
Checkout flow examples for Dintero Client.

Creates a session, reads the transaction and captures it.
Requires DINTERO_ACCOUNT_ID and credentials in the environment.
Pass a transaction id to capture it:

    python examples/01_checkout_flow.py T12345678.abc
"""

import asyncio
import sys

from dintero_client import (
    ClientError,
    Currency,
    DinteroClient,
    DinteroError,
    Money,
    PaginationParams,
)


async def create_session(client: DinteroClient):
    """Create a payment session."""
    print("\n=== Create Session ===")

    session = await client.checkout.create_session({
        "url": {"return_url": "https://shop.example/return"},
        "order": {
            "amount": Money.from_major(299, Currency.NOK).amount,
            "currency": "NOK",
            "merchant_reference": "order-1",
        },
    })
    print(f"Session: {session['id']}")
    print(f"Pay at: {session.get('url')}")
    return session


async def capture(client: DinteroClient, transaction_id: str):
    """Capture the full amount of an authorized transaction."""
    print("\n=== Capture ===")

    transaction = await client.checkout.get_transaction(transaction_id)
    result = await client.checkout.capture_transaction(
        transaction_id, transaction["amount"], capture_reference="capture-1"
    )
    print(f"Status: {result['status']}")


async def list_recent(client: DinteroClient):
    """First page of transactions."""
    print("\n=== Recent Transactions ===")

    page = await client.checkout.list_transactions(PaginationParams(limit=5))
    for transaction in page:
        print(f"{transaction['id']}: {transaction['status']}")


async def main():
    print("=" * 50)
    print("Dintero Client - Checkout Examples")
    print("=" * 50)

    async with DinteroClient.from_env() as client:
        try:
            await create_session(client)
            await list_recent(client)
            if len(sys.argv) > 1:
                await capture(client, sys.argv[1])
        except ClientError as e:
            print(f"\nRejected ({e.status_code}): {e}")
        except DinteroError as e:
            print(f"\nError [{e.kind}]: {e}")


if __name__ == "__main__":
    asyncio.run(main())
