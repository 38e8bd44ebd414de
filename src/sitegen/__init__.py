"""Client for the conversational website generator backend."""

__version__ = "0.1.0"
