"""
Auto-Translate Progress Data Class

Contains the TranslateProgress dataclass persisted while a job runs.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


@dataclass
class TranslateProgress:
    """Progress of the auto-translate job, counted in source texts."""
    size_target_translates: int = 0
    size_translated_translates: int = 0

    def advance(self) -> "TranslateProgress":
        """Count one more finished source text, never past the target."""
        if self.size_translated_translates < self.size_target_translates:
            self.size_translated_translates += 1
        return self

    @property
    def is_complete(self) -> bool:
        return self.size_translated_translates >= self.size_target_translates

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["TranslateProgress"]:
        if not data:
            return None
        target = int(data.get("size_target_translates") or 0)
        translated = int(data.get("size_translated_translates") or 0)
        return cls(
            size_target_translates=target,
            size_translated_translates=min(translated, target),
        )
