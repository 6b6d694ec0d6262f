"""
Run the CLI as a module.

Usage:
    python -m fep_server serve
    python -m fep_server list --status FINAL
"""

from .main import main

if __name__ == "__main__":
    main()
