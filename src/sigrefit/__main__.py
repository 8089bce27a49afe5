"""Command-line interface for sigrefit.

This module provides command-line access to sigrefit utilities.

Usage:
    python -m sigrefit strict-fit COUNTS SIGNATURES -o DIR
"""

import sys


def main():
    """Main CLI entry point."""
    if len(sys.argv) < 2:
        print(__doc__)
        print("\nAvailable commands:")
        print("  strict-fit    Strictly refit signatures to samples")
        return 1

    command = sys.argv[1]

    if command == "strict-fit":
        from sigrefit.strict_fit_cli import main as strict_fit_main

        return strict_fit_main(sys.argv[2:])

    else:
        print(f"Unknown command: {command}")
        print(__doc__)
        return 1


if __name__ == "__main__":
    sys.exit(main())
