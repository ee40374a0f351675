"""Version information for psreadiness."""

__version__ = "0.1.0"
