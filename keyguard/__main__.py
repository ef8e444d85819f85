"""
Keyguard Module Entry Point
============================

Allows running the Keyguard CLI via: python -m keyguard
"""

from keyguard.cli import main

if __name__ == "__main__":
    main()
