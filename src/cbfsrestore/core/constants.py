"""
Project-wide constants that are unlikely to change at runtime.
"""

RESTORE_NAMESPACE = ".cbfs/backup/restore"
RESTORE_SUCCESS_STATUS = 201  # Created

DEFAULT_BASE_URL = "http://localhost:8484/"
DEFAULT_MATCH_PATTERN = ".*"
DEFAULT_WORKERS = 4
DEFAULT_QUEUE_SIZE = 1  # handoff buffer between scanner and workers

READ_CHUNK_SIZE = 64 * 1024
MAX_RECORD_SIZE = 16 * 1024 * 1024  # characters of a single undecoded record
