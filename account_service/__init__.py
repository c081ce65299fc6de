"""Account service: user lifecycle and JWT authentication."""

__version__ = "0.1.0"
