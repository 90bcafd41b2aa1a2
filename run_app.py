#!/usr/bin/env python3
from __future__ import annotations

import sys
from pathlib import Path


def main() -> int:
    root = Path(__file__).resolve().parent
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))

    # Import after sys.path adjustment so the checkout runs without installing.
    from objview.app import main as gui_main
    from objview.logging import setup_logging

    setup_logging()
    return gui_main(sys.argv)


if __name__ == "__main__":
    raise SystemExit(main())
