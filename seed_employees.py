"""
Seed the employees collection with the fixed operator accounts.

Usage:
    python seed_employees.py
"""

import sys

from swiftgate.seed import main

if __name__ == "__main__":
    sys.exit(main())
