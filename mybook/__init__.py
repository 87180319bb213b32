"""
MyBook Application Package

MyBook is a social reading tracker: users keep a collection of the books
they have read, rate and review them, rank up to four favorite books and
discover other readers.

Package Structure:
- config.py: Application configuration using Pydantic Settings
- database.py: SQLAlchemy database connection and session management
- exceptions.py: Domain error taxonomy mapped to HTTP responses
- main.py: FastAPI application factory and configuration
- dependencies.py: Dependency injection functions
- models/: SQLAlchemy ORM models
- schemas/: Pydantic request/response schemas
- routers/: API route handlers
- services/: Business logic (favorites ranking, collections, catalog, ...)
"""

__version__ = "0.1.0"
