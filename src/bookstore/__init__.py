"""Bookstore service: book catalog REST API and its reverse-proxy gateway."""

__version__ = "0.1.0"
