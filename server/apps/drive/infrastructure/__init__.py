"""Infrastructure layer for drive app.

This package contains integrations with external systems:
- S3-compatible storage backend for uploaded blobs
- Metadata helpers (MIME type, storage paths)

Keep infrastructure concerns separate from business logic.
"""
