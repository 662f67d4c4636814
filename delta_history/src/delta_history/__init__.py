"""Delta History: browse the git history of a single file in the terminal."""

__version__ = "0.1.0"
