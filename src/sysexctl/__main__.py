"""Main entry point for ``python -m sysexctl``."""

from sysexctl.cli.main import main

if __name__ == "__main__":
    main()
