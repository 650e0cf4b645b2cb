"""Entities module with hybrid entity-centric structure.

Each entity has its own package containing:
- entity.py: Domain model with validation and the JSON wire shape
- table.py: Database persistence model
- repository.py: Data access layer
"""

from .service.book import Book, BookRepository, BookTable

__all__ = ["Book", "BookRepository", "BookTable"]
