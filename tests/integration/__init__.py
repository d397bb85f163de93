"""
API test package for the task backend.

Tests use the Flask test client and cover:
- CRUD operation testing
- Input validation testing
- Error handling and route-not-found testing
"""
