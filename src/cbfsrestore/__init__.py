"""
cbfsrestore: replay a CBFS backup archive against a restore endpoint.
"""

__version__ = "0.1.0"
