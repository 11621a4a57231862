"""Access to gzip-compressed backup archives."""

from cbfsrestore.archive.reader import ArchiveReader, open_archive

__all__ = ["ArchiveReader", "open_archive"]
