"""Time Capsule - password-sealed messages that open after a given date."""

__version__ = "0.1.0"
