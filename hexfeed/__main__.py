"""Run the hexfeed server: `python -m hexfeed`."""

from hexfeed.server import main

if __name__ == "__main__":
    raise SystemExit(main())
