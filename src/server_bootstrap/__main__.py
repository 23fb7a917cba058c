"""Allow running as ``python -m server_bootstrap``."""

from server_bootstrap.cli import main

if __name__ == "__main__":
    main()
