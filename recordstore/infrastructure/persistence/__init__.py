"""Persistence: SQLAlchemy engine, record model, store and cached repository."""
