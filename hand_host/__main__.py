import argparse
import asyncio
import logging
from decimal import Decimal

from hand_engine.models import TableConfig

from .server import HandHost


def main() -> None:
    parser = argparse.ArgumentParser(description="Poker hand engine query service")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8766)
    parser.add_argument("--table-size", type=int, default=6, help="Default table size when a hand omits it (2, 6 or 9)")
    parser.add_argument("--sb", type=Decimal, default=Decimal("1"))
    parser.add_argument("--bb", type=Decimal, default=Decimal("2"))
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    config = TableConfig(size=args.table_size, small_blind=args.sb, big_blind=args.bb)
    server = HandHost(config)
    asyncio.run(server.start(host=args.host, port=args.port))


if __name__ == "__main__":
    main()
