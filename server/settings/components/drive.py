"""Drive app settings."""

from server.settings.components import config

# Storage limit for new users: 15 GB in bytes
DRIVE_STORAGE_LIMIT_BYTES = config(
    'DRIVE_STORAGE_LIMIT_BYTES',
    cast=int,
    default=15 * 1024 * 1024 * 1024,
)

# Largest accepted upload: 2 GB in bytes
DRIVE_MAX_UPLOAD_BYTES = config(
    'DRIVE_MAX_UPLOAD_BYTES',
    cast=int,
    default=2 * 1024 * 1024 * 1024,
)

# How far back the "recent" view looks
DRIVE_RECENT_DAYS = config('DRIVE_RECENT_DAYS', cast=int, default=30)

# Trashed items older than this are purged by `cleanup_trash`
DRIVE_TRASH_RETENTION_DAYS = config(
    'DRIVE_TRASH_RETENTION_DAYS',
    cast=int,
    default=30,
)
