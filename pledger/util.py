import logging

import pledger.parser as parser
from pledger.parser import JournalElement

logger = logging.getLogger(__name__)

class FileError(Exception):
    NOT_FOUND = "not found"
    UNKNOWN = "unknown"

    def __init__(self, path: str, kind: str):
        if kind == FileError.NOT_FOUND:
            super().__init__(f'File "{path}" not found')
        else:
            super().__init__("Unknown error while reading the file")
        self.path = path
        self.kind = kind

def read_content(path: str) -> str:
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
    except FileNotFoundError as e:
        raise FileError(path, FileError.NOT_FOUND) from e
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Unable to read {path}: {e}")
        raise FileError(path, FileError.UNKNOWN) from e
    logger.info(f"Read {len(content)} characters from {path}.")
    return content

def read_journal(path: str) -> list[JournalElement]:
    return parser.parse_journal(read_content(path))
