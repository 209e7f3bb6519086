"""
Logging and retry examples for Dintero Client.

Shows JSON file logging with masked credentials, correlation ids shared
by every attempt of a request, and a custom retry policy.
"""

import asyncio

from dintero_client import DinteroClient, DinteroConfig, DinteroError, LoggingConfig
from dintero_client.core.logging import correlation_scope


async def main():
    print("=" * 50)
    print("Dintero Client - Logging and Retries")
    print("=" * 50)

    logging_config = LoggingConfig.create(
        level="DEBUG",
        format="json",
        enable_console=True,
        file_path="logs/dintero.log",
    )
    config = DinteroConfig.create(
        "T12345678",
        client_id="my-client",
        client_secret="my-secret",
        logging=logging_config,
    ).with_retry(max_retries=5, initial_backoff_ms=200, max_backoff_ms=5000)

    async with DinteroClient(config) as client:
        # every log line of this request carries the same correlation id
        with correlation_scope("checkout-debug-1") as cid:
            print(f"Correlation id: {cid}")
            try:
                await client.orders.get_order("missing-order")
            except DinteroError as e:
                print(f"Failed after retries [{e.kind}]: {e}")


if __name__ == "__main__":
    asyncio.run(main())
