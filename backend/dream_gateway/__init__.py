"""AI gateway for the dream journal mobile client."""

__version__ = "1.0.0"
