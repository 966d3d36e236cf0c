"""
File utilities for loading customer files.
"""

import logging

logger = logging.getLogger(__name__)


def read_customer_file(filename: str, encoding: str = "utf-8") -> str:
    """
    Read a complete customer file into memory.

    Line endings are passed through untouched; the parser recognises
    "\\n", "\\r\\n" and "\\r".

    Args:
        filename: Path to the customer file
        encoding: Text encoding of the file (default: utf-8)

    Returns:
        The file content

    Raises:
        FileNotFoundError: If the file does not exist
        PermissionError: If the file cannot be read
        IsADirectoryError: If the path is a directory
        UnicodeDecodeError: If the file is not valid text in the given encoding
    """
    with open(filename, "r", encoding=encoding, newline="") as f:
        content = f.read()
    logger.debug(f"Read {len(content)} characters from {filename}")
    return content
