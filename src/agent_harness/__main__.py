"""
Entry point for running agent_harness as a module.

Allows running a scripted session via:
    python -m agent_harness run session.yaml
"""

import sys

from agent_harness.cli import main

if __name__ == "__main__":
    sys.exit(main())
