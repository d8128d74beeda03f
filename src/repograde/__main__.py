"""Entry point for running repograde as a module.

Usage:
    python -m repograde [command] [options]

Example:
    python -m repograde analyze https://github.com/owner/repo
    python -m repograde score owner/repo --json
"""

from repograde.cli import app

if __name__ == "__main__":
    app()
