"""Working-time accounting from keyboard and mouse activity."""

__version__ = "0.3.0"
