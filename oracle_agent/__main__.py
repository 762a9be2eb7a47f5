"""Allow ``python -m oracle_agent``."""

from oracle_agent.cli import app

if __name__ == "__main__":
    app()
