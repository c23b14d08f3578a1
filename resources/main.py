"""
MoKee Setup Wizard - launcher

Runs the wizard from a source checkout: python resources/main.py [options]
"""

import sys

from mokee_setupwizard.app import main


if __name__ == "__main__":
    sys.exit(main())
