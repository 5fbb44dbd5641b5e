"""Allow ``python -m rvr_color`` to run the command-line harness."""

from __future__ import annotations

import sys


def main() -> None:
    from rvr_color import run

    sys.exit(run(sys.argv[1:]))


if __name__ == "__main__":
    main()
