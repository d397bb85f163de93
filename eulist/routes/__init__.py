"""
Routes package for the task backend.

This package contains a single blueprint:
- api: the task CRUD endpoints, the root capability listing and the
  application-wide route-not-found handlers
"""
