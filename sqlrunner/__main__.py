"""Allow ``python -m sqlrunner``."""

from sqlrunner.cli import main

if __name__ == "__main__":
    main()
