"""Main entry point for running axer as a module.

Usage:
    python -m axer get <url>
    python -m axer --help
"""

from axer.cli import main

if __name__ == '__main__':
    main()
