"""jsonlogfmt: render JSON log streams from stdin as human-friendly lines."""

from jsonlogfmt.cli import run

if __name__ == "__main__":
    run()
