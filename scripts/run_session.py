"""Run the dispatch loop against an elevator authority over HTTP."""
from __future__ import annotations

import argparse
import logging

from client import AuthorityClient, run_session


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--base-url", default="http://127.0.0.1:8000", help="Authority base URL")
    parser.add_argument("--user", default="tester", help="User name sent when starting a session")
    parser.add_argument("--problem", type=int, default=1, help="Problem variant (0, 1 or 2)")
    parser.add_argument("--elevators", type=int, default=2, help="Number of elevators (1-4)")
    parser.add_argument("--engine", default="look", help="Decision policy: look or strict")
    parser.add_argument("--verbose", action="store_true", help="Log every elevator decision")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    client = AuthorityClient(args.base_url)
    try:
        summary = run_session(client, args.user, args.problem, args.elevators, args.engine)
    finally:
        client.close()

    print(f"Cycles: {summary.cycles}")
    print(f"Final timestamp: {summary.timestamp}")
    print(f"Ended by authority: {summary.ended}")


if __name__ == "__main__":
    main()
