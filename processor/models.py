"""Data models for event classification and ordering."""
from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from typing import Optional


class Temporal(IntEnum):
    """
    Temporal class of an event relative to a reference day.

    The values are the primary sort key: CURRENT sorts before FUTURE,
    FUTURE before PAST.
    """
    CURRENT = 0
    FUTURE = 1
    PAST = 2


@dataclass
class RawEvent:
    """Event as loaded from the content directory."""
    id: str
    title: str
    date: datetime
    body: Optional[str] = None
    location: Optional[str] = None


@dataclass
class ProcessedEvent:
    """Classified event ready for display."""
    id: str
    title: str
    date: datetime
    temporal: Temporal
    description: Optional[str] = None
    location: Optional[str] = None
