"""Business logic layer for drive app.

This package contains all business logic for the drive:
- Folder and file create, update, move, delete
- Derived listings (recent, starred, shared, trash)
- Storage accounting against user quotas
- Share links and trash management

All business logic should be implemented here, separate from
models (data layer), views (HTTP) and infrastructure (external systems).
"""
