"""Shared data types for the translation engine."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class GameContext:
    """
    Run-wide context steering the provider.

    Attributes:
        description: Free text describing the game/product
        features: Mapping from feature key to per-language names, plus an
            optional "context" note. Example:
            {"cash": {"en": "Cash", "es": "Efectivo", "context": "Currency"}}
    """
    description: str = ""
    features: Dict[str, Dict[str, str]] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> "GameContext":
        return cls()


@dataclass(frozen=True)
class WorkItem:
    """One unit of translation work: a row and the languages to fill."""
    key: str
    source_text: str
    target_language_codes: Tuple[str, ...]
    context: Optional[str]
    row_index: int
    category: Optional[str] = None


@dataclass(frozen=True)
class Cell:
    """A cell value plus its optional side annotation (note/comment)."""
    value: Any
    annotation: Optional[str] = None
