# =============================================================================
# utils/file_utils.py - User list file reading
# =============================================================================

import logging
from typing import Iterator, Tuple


class UserListFile:
    """Utilities for reading the user list"""

    @staticmethod
    def read_lines(file_path: str, encoding: str = 'utf-8') -> Iterator[Tuple[int, str]]:
        """Yield (line_number, line) pairs, numbered from 1, without line terminators"""
        logger = logging.getLogger(__name__)

        try:
            with open(file_path, 'r', encoding=encoding) as file:
                logger.info(f"Reading user list {file_path}")
                for line_number, line in enumerate(file, start=1):
                    yield line_number, line.rstrip('\r\n')

        except FileNotFoundError:
            logger.error(f"Input file {file_path} not found")
            raise
