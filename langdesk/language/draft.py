"""
Draft Store Module

Source texts known to the app that have no translation in any locale yet.
Kept as a JSON list in a single file; the file is removed when the list
becomes empty.
"""

import json
from typing import List

from langdesk.language.context import LanguageContext
from langdesk.logger import get_logger

logger = get_logger(__name__)


class DraftStore:
    """Ordered, duplicate-free list of untranslated source texts."""

    def __init__(self, context: LanguageContext):
        self.context = context
        self._items: List[str] = self.all(context)

    @classmethod
    def all(cls, context: LanguageContext) -> List[str]:
        raw = context.storage.read(context.draft_file)
        if not raw:
            return []
        try:
            data = json.loads(raw.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(f"Draft file is corrupted, treating it as empty: {e}")
            return []
        if not isinstance(data, list):
            logger.error("Draft file does not hold a list, treating it as empty")
            return []
        seen = set()
        items = []
        for item in data:
            if isinstance(item, str) and item not in seen:
                seen.add(item)
                items.append(item)
        return items

    @classmethod
    def delete_all(cls, context: LanguageContext):
        context.storage.delete(context.draft_file)
        logger.info("All drafts deleted")

    def save(self):
        if self._items:
            payload = json.dumps(self._items, ensure_ascii=False, indent=2)
            self.context.storage.write(self.context.draft_file, payload.encode("utf-8"))
        else:
            self.context.storage.delete(self.context.draft_file)

    def has(self, source: str) -> bool:
        return source in self._items

    def add(self, source: str):
        if source and not self.has(source):
            self._items.append(source)

    def edit(self, source: str, new_source: str):
        """Rename a draft in place. A rename onto an existing draft merges the two."""
        if not self.has(source) or not new_source:
            return
        if self.has(new_source) and new_source != source:
            self.delete(source)
            return
        self._items = [new_source if item == source else item for item in self._items]

    def delete(self, source: str):
        self._items = [item for item in self._items if item != source]

    def items(self) -> List[str]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)
