"""
MyBook API test suite.

- conftest.py: SQLite test database, TestClient, users and shelf fixtures
- test_favorites_service.py: ranking rules against the session directly
- test_*.py: one module per router, through the HTTP API

Run with:
    pytest
    pytest tests/test_favorites.py -v
"""
