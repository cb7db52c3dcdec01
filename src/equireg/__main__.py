from __future__ import annotations

import argparse
import logging
import time

from .core.config import LOG_LEVELS, Settings
from .runtime.server import run


def main() -> None:
    env = Settings.from_env()

    p = argparse.ArgumentParser(prog="equireg", description="equireg: equipment ownership registry")
    p.add_argument("--host", default=env.host)
    p.add_argument("--port", type=int, default=env.port)
    p.add_argument("--data-file", default=None, help="JSON snapshot file; omit to keep the registry in memory")
    p.add_argument("--log-level", default=env.log_level, choices=LOG_LEVELS)
    args = p.parse_args()

    level = "DEBUG" if args.log_level == "trace" else args.log_level.upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    srv = run(host=args.host, port=args.port, data_file=args.data_file, log_level=args.log_level, access_log=True)
    print(srv.url)

    # Block forever (so it behaves like a normal CLI server)
    try:
        while True:
            time.sleep(3600)
    except KeyboardInterrupt:
        srv.stop()


if __name__ == "__main__":
    main()
