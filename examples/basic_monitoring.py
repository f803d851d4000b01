#!/usr/bin/env python3
"""
TDLib Basic Monitoring Example

This example demonstrates how to create a TDLib JSON client and print the
updates it produces.

Expected behavior:
- Loads libtdjson (auto-detected if --library is not given)
- Runs a synchronous request with execute()
- Sends getOption and polls receive() for updates
- Displays call statistics on exit
"""

import argparse
import logging
import sys
import time

from tdjson import TdJsonClient, TdJsonError, find_tdjson_libraries

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
logger = logging.getLogger(__name__)


def main():
    """Main monitoring function."""
    parser = argparse.ArgumentParser(description="TDLib Basic Monitoring")
    parser.add_argument("--library", help="Path to libtdjson (auto-detect if not specified)")
    parser.add_argument("--log-level", type=int, default=1, help="Native log verbosity level")
    parser.add_argument("--duration", type=float, default=10.0, help="Monitoring duration (seconds)")
    parser.add_argument("--timeout", type=float, default=1.0, help="Receive timeout (seconds)")
    parser.add_argument("--list-libraries", action="store_true", help="List candidate tdjson libraries")

    args = parser.parse_args()

    if args.list_libraries:
        print("tdjson candidates:")
        for path in find_tdjson_libraries():
            print(f"  📍 {path}")
        return 0

    try:
        client = TdJsonClient(args.library, log_level=args.log_level)
    except TdJsonError as e:
        print(f"❌ {e}")
        print("💡 Try: python examples/basic_monitoring.py --library <PATH>")
        return 1

    with client:
        entities = client.execute({"@type": "getTextEntities", "text": "@telegram /test https://telegram.org"})
        print(f"✅ Synchronous execute: {entities}")

        client.send({"@type": "getOption", "name": "version", "@extra": "version"})

        start_time = time.time()
        update_types = {}
        try:
            while time.time() - start_time < args.duration:
                update = client.receive(args.timeout)
                if update is None:
                    continue
                update_type = update.get("@type", "unknown")
                update_types[update_type] = update_types.get(update_type, 0) + 1
                if update.get("@extra") == "version":
                    print(f"📨 TDLib version: {update.get('value')}")
                else:
                    print(f"📨 {update_type}")
        except KeyboardInterrupt:
            print("\n⏹️ Stopped by user")

        print(f"Update types: {update_types}")
        print(f"Stats: {client.get_stats()}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
