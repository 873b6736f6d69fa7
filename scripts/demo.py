#!/usr/bin/env python3
"""Demo: push a test notification through the relay.

Requires the relay to be running:
    python -m push_relay

Usage:
    python scripts/demo.py TOKEN [TOKEN ...] [--relay-url URL] [--broadcast]
"""

import argparse
import sys

import httpx


def main() -> None:
    parser = argparse.ArgumentParser(description="Send a demo push notification")
    parser.add_argument("tokens", nargs="+", help="Expo push tokens to notify")
    parser.add_argument(
        "--relay-url",
        default="http://localhost:3001",
        help="Push relay base URL (default: http://localhost:3001)",
    )
    parser.add_argument("--title", default="Hello from church")
    parser.add_argument("--body", default="This is a test notification")
    parser.add_argument(
        "--broadcast",
        action="store_true",
        help="Use the broadcast endpoint instead of send",
    )
    args = parser.parse_args()

    with httpx.Client(base_url=args.relay_url, timeout=30.0) as client:
        try:
            resp = client.get("/api/health")
        except httpx.ConnectError:
            print(f"Cannot connect to {args.relay_url}")
            print("Make sure the relay is running: python -m push_relay")
            sys.exit(1)

        if resp.status_code != 200:
            print(f"Relay unhealthy: {resp.text}")
            sys.exit(1)

        print(f"Relay healthy at {args.relay_url}\n")

        endpoint = "broadcast" if args.broadcast else "send"
        path = f"/api/notifications/{endpoint}"
        resp = client.post(path, json={
            "tokens": args.tokens,
            "title": args.title,
            "body": args.body,
            "data": {"screen": "Home"},
        })
        body = resp.json()

        outcome = body.get("message") or body.get("error")
        print(f"  {path}  -> {resp.status_code}  {outcome}")
        # Tickets line up with the well-formed tokens only.
        for index, ticket in enumerate(body.get("results", [])):
            status = ticket.get("status")
            print(f"  #{index:<4d} {status:6s} {ticket.get('message', '')}")
        for token in body.get("invalidTokens", []):
            print(f"  invalid: {token}")

    if resp.status_code != 200:
        sys.exit(1)


if __name__ == "__main__":
    main()
