#!/usr/bin/env python3

import json
from typing import Any

import anyio
import click
import httpx


def show(label: str, payload: Any) -> None:
    print(f"{label}:", json.dumps(payload, indent=2))


async def run(base: str, wait_seconds: float) -> None:
    async with httpx.AsyncClient(base_url=base, timeout=10.0) as client:
        r = await client.post("/cart")
        r.raise_for_status()
        created = r.json()
        cart_id = created["cart"]["id"]
        print("cart id:", cart_id)

        for sku, quantity in (("PLAN-5G-PLUS", 1), ("ADDON-ROAM", 2), ("ADDON-ROAM", 1)):
            r = await client.post(f"/cart/{cart_id}/items", json={"sku": sku, "quantity": quantity})
            r.raise_for_status()
        body = r.json()
        show("after adds", body["cart"])
        token = body["rehydrationToken"]

        r = await client.patch(f"/cart/{cart_id}/customer", json={"email": "demo@example.com"})
        r.raise_for_status()

        if wait_seconds > 0:
            print(f"waiting {wait_seconds}s for the cart to expire...")
            await anyio.sleep(wait_seconds)
            r = await client.get(f"/cart/{cart_id}")
            print("lookup after wait:", r.status_code, r.json())
        else:
            # Simulate loss of the record
            await client.delete(f"/cart/{cart_id}")

        r = await client.post("/cart/rehydrate", json={"token": token})
        r.raise_for_status()
        recovered = r.json()
        print("recovered cart id:", recovered["cart"]["id"])
        show("recovered", recovered["cart"])


@click.command()
@click.option("--base", default="http://127.0.0.1:3000", help="Base URL of the cart API")
@click.option("--wait", "wait_seconds", default=0.0, help="Seconds to wait for TTL expiry instead of deleting")
def main(base: str, wait_seconds: float) -> None:
    anyio.run(run, base, wait_seconds)


if __name__ == "__main__":
    main()
