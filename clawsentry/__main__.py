"""
ClawSentry Entry Point — Run with: python -m clawsentry

Usage:
    python -m clawsentry [--config PATH] [--base-dir DIR] <command>

Commands:
    serve, logs, scan, policy, export, incident
"""

import sys


def main():
    """Main entry point for ClawSentry."""
    from clawsentry.cli import main as cli_main
    return cli_main()


if __name__ == "__main__":
    sys.exit(main() or 0)
