"""zippy — word-at-a-time text player for the terminal."""

__version__ = "0.1.0"
