"""Named cursor bookmarks that follow the text they point at."""

__all__ = [
    "adapters",
    "buffer",
    "commands",
    "host",
    "marks",
    "runtime",
]

__version__ = "0.1.0"
