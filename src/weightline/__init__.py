"""weightline: gap-filled daily weight timelines."""

__version__ = "0.1.0"
