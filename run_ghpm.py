"""Convenience shim to run ghpm from a source checkout."""

from __future__ import annotations

import sys

from ghpm.milestones.runner import main


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
