"""Markdown content loader for event documents."""
import logging
import re
from datetime import date, datetime
from pathlib import Path
from typing import List, Tuple
from zoneinfo import ZoneInfo

import yaml

from processor.models import RawEvent

logger = logging.getLogger(__name__)

FRONTMATTER_PATTERN = re.compile(
    r"\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)(.*)\Z",
    re.S | re.M
)


class InvalidEventDocument(ValueError):
    """Raised when an event document does not match the event schema."""


class MarkdownEventLoader:
    """Loader for a directory of markdown event documents."""

    PATTERN = "*.md"

    def __init__(self, events_dir, timezone: str = 'UTC'):
        """
        Initialize the loader.

        Args:
            events_dir: Directory holding one markdown file per event
            timezone: IANA zone used to interpret and normalize event dates
        """
        self.events_dir = Path(events_dir)
        self.tz = ZoneInfo(timezone)

    def today(self) -> datetime:
        """Current local time in the loader's timezone, as a naive datetime."""
        return datetime.now(self.tz).replace(tzinfo=None)

    def load_events(self) -> List[RawEvent]:
        """
        Load every event document in the events directory.

        Returns:
            List of RawEvent objects, in file name order

        Raises:
            FileNotFoundError: If the events directory does not exist
            PermissionError: If the events directory cannot be listed
        """
        if not self.events_dir.is_dir():
            raise FileNotFoundError(
                f"Events directory not found: {self.events_dir}"
            )

        # listing must fail loudly on an unreadable directory
        paths = sorted(
            path for path in self.events_dir.iterdir()
            if path.is_file() and path.match(self.PATTERN)
        )
        logger.info(f"Loading {len(paths)} event documents from {self.events_dir}")

        events = []
        for path in paths:
            try:
                events.append(self._load_document(path))
            except (InvalidEventDocument, yaml.YAMLError, OSError, UnicodeDecodeError) as e:
                logger.warning(f"Skipping event document '{path.name}': {e}")
                continue

        logger.info(
            f"Loaded {len(events)} valid events out of {len(paths)} documents"
        )
        return events

    def _load_document(self, path: Path) -> RawEvent:
        """
        Parse a single event document.

        Args:
            path: Path to the markdown file

        Returns:
            RawEvent built from the frontmatter and body
        """
        frontmatter, body = self._split_frontmatter(
            path.read_text(encoding='utf-8')
        )
        data = yaml.safe_load(frontmatter) or {}
        if not isinstance(data, dict):
            raise InvalidEventDocument("frontmatter is not a mapping")

        title = data.get('title')
        if title is None:
            raise InvalidEventDocument("missing required field: title")
        if not isinstance(title, str):
            raise InvalidEventDocument("title must be a string")

        if data.get('date') is None:
            raise InvalidEventDocument("missing required field: date")
        event_date = self._normalize_date(data['date'])

        location = data.get('location')
        if location is not None and not isinstance(location, str):
            raise InvalidEventDocument("location must be a string")

        return RawEvent(
            id=path.stem,
            title=title,
            date=event_date,
            body=body.strip() or None,
            location=location
        )

    def _split_frontmatter(self, text: str) -> Tuple[str, str]:
        """Split a document into its YAML frontmatter and markdown body."""
        match = FRONTMATTER_PATTERN.match(text.lstrip('\ufeff'))
        if not match:
            raise InvalidEventDocument("missing frontmatter block")
        return match.group(1), match.group(2)

    def _normalize_date(self, value) -> datetime:
        """
        Convert a frontmatter date value to a naive local datetime.

        Args:
            value: YAML date, YAML datetime or ISO 8601 string

        Returns:
            Naive datetime in the loader's timezone
        """
        if isinstance(value, str):
            value = self._parse_iso(value)

        if isinstance(value, datetime):
            if value.tzinfo is not None:
                value = value.astimezone(self.tz).replace(tzinfo=None)
            return value
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day)

        raise InvalidEventDocument(f"invalid date: {value!r}")

    def _parse_iso(self, value: str) -> datetime:
        try:
            return datetime.fromisoformat(value.strip())
        except ValueError:
            raise InvalidEventDocument(f"invalid date: {value!r}") from None
