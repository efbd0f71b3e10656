"""Allow ``python -m claims_timeline``."""

from claims_timeline.cli import app

if __name__ == "__main__":
    app()
