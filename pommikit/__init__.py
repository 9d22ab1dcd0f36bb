"""Building blocks for web applications: password hashing, auth cookies, value binding, WSGI middleware and utilities."""

__version__ = "0.1.0"