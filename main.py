#!/usr/bin/env python3
"""
funcaptcha
FunCaptcha / Arkose challenge token client

Usage:
    python main.py token --public-key KEY --site https://example.com
    python main.py token --profile openai --json
    python main.py profiles
"""

import sys

from funcaptcha.cli import main

if __name__ == "__main__":
    sys.exit(main())
