"""
Convenience entry point for running clinicscheduler directly.

Usage: python -m clinicscheduler [command] [options]
"""

from .cli.app import app

if __name__ == "__main__":
    app()
