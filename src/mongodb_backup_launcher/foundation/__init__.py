"""Foundation utilities for shared infrastructure components.

This package provides shared utilities including:
- Structured JSON logging
- Base exception classes for collaborator (client) failures
"""
