"""Package entry point for ``python -m autosub_replace``."""

from autosub_replace.cli import main

if __name__ == "__main__":
    main()
