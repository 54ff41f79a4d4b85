"""Chapter data model."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Chapter:
    """A single chapter as supplied by the chapter store.

    Frozen: the applicator hands back a new instance instead of
    mutating the caller's copy.
    """
    id: str
    number: int
    content: str = ""
    title: str = ""
    updated_at: Optional[datetime] = None
