"""
Message file extractor.

Reads a flat message list from a JSON or JSONL file and validates it into
``Message`` objects ready for segmentation.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from chatcadence.core.models import Message

logger = logging.getLogger(__name__)


class MessageFileExtractor:
    """
    Extractor for messages stored on disk.

    Accepted layouts:

    - a JSON array of message objects
    - a JSON object with a ``messages`` array
    - JSONL, one message object per line (``.jsonl`` / ``.ndjson``)

    Message objects use ``sender_id`` (or ``from_id``), ``sent_at`` (or
    ``timestamp``) and ``content``; other keys are ignored.

    Parameters
    ----
    path : Path or str
        File to read
    """

    JSONL_SUFFIXES = {".jsonl", ".ndjson"}

    def __init__(self, path: Union[Path, str]):
        self.path = Path(path)
        self._rows_cache: Optional[List[Dict[str, Any]]] = None

    def _read_rows(self) -> List[Dict[str, Any]]:
        """
        Load raw message dictionaries from the file.

        Raises
        ---
        FileNotFoundError
            If the file does not exist
        ValueError
            If the file is not valid JSON/JSONL or has the wrong shape
        """
        if not self.path.exists():
            raise FileNotFoundError(f"Message file not found: {self.path}")

        with open(self.path, "r", encoding="utf-8") as f:
            if self.path.suffix.lower() in self.JSONL_SUFFIXES:
                return self._parse_jsonl(f)
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in {self.path}: {e}") from e

        if isinstance(data, dict):
            data = data.get("messages")
        if not isinstance(data, list):
            raise ValueError(
                f"Expected a list of messages or an object with 'messages' in {self.path}"
            )
        return data

    def _parse_jsonl(self, f) -> List[Dict[str, Any]]:
        rows = []
        for line_no, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                rows.append(json.loads(line))
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON on line {line_no} of {self.path}: {e}") from e
        return rows

    def rows(self) -> List[Dict[str, Any]]:
        """Raw rows, cached after the first read."""
        if self._rows_cache is None:
            self._rows_cache = self._read_rows()
        return self._rows_cache

    def load(self) -> List[Message]:
        """
        Validate every row into a Message.

        Returns
        ----
        List[Message]
            Messages in file order

        Raises
        ---
        pydantic.ValidationError
            If a row lacks a sender or has an unparseable timestamp
        """
        messages = [Message.model_validate(row) for row in self.rows()]
        logger.info("Loaded %d messages from %s", len(messages), self.path)
        return messages
