"""jsonlogfmt: render JSON log streams as human-friendly lines."""

__version__ = "0.1.0"
