"""Allow ``python -m declsite``."""

from declsite.cli.app import app

if __name__ == "__main__":
    app()
