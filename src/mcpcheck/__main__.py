# Entry point for `python -m mcpcheck`
import sys

from mcpcheck.cli import main

if __name__ == "__main__":
    sys.exit(main())
