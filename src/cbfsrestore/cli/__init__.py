"""
Initialize the CLI package. Contains the Typer applications of cbfs-restore.
"""

import logging

# urllib3 logs every new connection at DEBUG; keep --verbose readable
logging.getLogger("urllib3").setLevel(logging.WARNING)
