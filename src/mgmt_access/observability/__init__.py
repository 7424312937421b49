"""
mgmt_access.observability

Observability package.

Responsibilities:
- Structured logging configuration.
"""

# Package marker.
