"""
Test suite for the task backend.

This package contains:
- unit/: model rules, request parsing and store behaviour
- integration/: HTTP tests through the Flask test client
"""
