"""Static reverse-proxy gateway in front of the book API."""
