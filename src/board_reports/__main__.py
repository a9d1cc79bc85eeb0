"""Allow ``python -m board_reports``."""

from board_reports.cli import app

if __name__ == "__main__":
    app()
