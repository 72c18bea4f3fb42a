"""Database package — declarative base and raw session factory."""
