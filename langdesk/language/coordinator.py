"""
Translation Coordinator Module

Applies admin edit batches to every accepted locale's catalog and to the
draft store, and answers the listing queries of the language screen.

Batch processing is sequential: locale by locale in accepted-locale
order, item by item inside a locale. Each locale's catalog and the draft
store are saved once at the end of that locale's pass, so a failure in
locale N leaves locales before N saved.
"""

from contextlib import contextmanager
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional

from langdesk.config import LANGUAGE_ITEMS_PER_PAGE
from langdesk.language.catalog import Catalog
from langdesk.language.context import LanguageContext
from langdesk.language.draft import DraftStore
from langdesk.language.edits import ChangedItem, LanguageBatch, parse_batch
from langdesk.logger import get_logger

logger = get_logger(__name__)


class FillState(str, Enum):
    EMPTY = "empty"
    HALF_FILLED = "half-filled"
    FILLED = "filled"


def classify_fill(filled_locales: Iterable[str], accepted_locales: Iterable[str]) -> FillState:
    """Fill state of a source text given the locales that translate it."""
    accepted = set(accepted_locales)
    filled = set(filled_locales) & accepted
    if not filled:
        return FillState.EMPTY
    if filled >= accepted:
        return FillState.FILLED
    return FillState.HALF_FILLED


@contextmanager
def locked_locale(context: LanguageContext, locale: str):
    """Hold the catalog lock of a locale, then the draft lock (always in that order)."""
    with context.storage.lock(context.catalog_file(locale)):
        with context.storage.lock(context.draft_file):
            yield


class TranslationCoordinator:
    """Entry point of the language screen for reads and edit batches."""

    def __init__(self, context: LanguageContext):
        self.context = context

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def apply(self, payload: Mapping[str, Any]) -> LanguageBatch:
        """
        Validate a raw payload and apply it.

        Raises:
            ValidationError: Before any store is touched
            StorageError: If a file cannot be saved
        """
        batch = parse_batch(payload, self.context.accepted_locales)
        if batch.remove_all:
            self.apply_remove_all()
        else:
            self.apply_parsed(batch)
        return batch

    def apply_batch(
        self,
        removed_items: Optional[List[str]] = None,
        changed_items: Optional[Mapping[str, Mapping[str, Any]]] = None,
    ) -> LanguageBatch:
        """Validate and apply removed/changed items (wire format)."""
        batch = parse_batch(
            {"removed_items": removed_items or [], "changed_items": changed_items or {}},
            self.context.accepted_locales,
        )
        self.apply_parsed(batch)
        return batch

    def apply_remove_all(self):
        Catalog.delete_all(self.context)
        DraftStore.delete_all(self.context)
        logger.info("All translations and drafts removed")

    def apply_parsed(self, batch: LanguageBatch):
        if not batch.removed_items and not batch.changed_items:
            return

        for locale in self.context.accepted_locales:
            with locked_locale(self.context, locale):
                catalog = Catalog(self.context, locale)
                drafts = DraftStore(self.context)
                # Only earlier locales' saves are visible during this pass,
                # so one snapshot per locale equals a per-item lookup.
                fill_snapshot = Catalog.all_translates(self.context)

                for source in batch.removed_items:
                    self._remove_item(source, catalog, drafts)

                for item in batch.changed_items:
                    self._apply_item(locale, item, catalog, drafts, fill_snapshot)

                catalog.save()
                drafts.save()

        logger.info(
            "Applied language batch: %d removed, %d changed, %d locales",
            len(batch.removed_items),
            len(batch.changed_items),
            len(self.context.accepted_locales),
        )

    @staticmethod
    def _remove_item(source: str, catalog: Catalog, drafts: DraftStore):
        if drafts.has(source):
            drafts.delete(source)
            return
        if catalog.has(source):
            catalog.delete(source)

    def is_draft(self, item: ChangedItem, fill_snapshot: Mapping[str, List[str]]) -> bool:
        """An item is a draft if it carries no translation and nothing translates it yet."""
        return not item.carries_translation and not fill_snapshot.get(item.source)

    def _apply_item(
        self,
        locale: str,
        item: ChangedItem,
        catalog: Catalog,
        drafts: DraftStore,
        fill_snapshot: Mapping[str, List[str]],
    ):
        source = item.source

        if self.is_draft(item, fill_snapshot):
            if catalog.has(source):
                catalog.delete(source)
            if item.new_default_text:
                drafts.edit(source, item.new_default_text)
            else:
                drafts.add(source)
            return

        if locale in item.removed_targets:
            catalog.delete(source)
            return

        is_new_translate = not (not item.is_new and catalog.has(source))
        if is_new_translate:
            target = item.target_for(locale)
            if target is None:
                return
            if drafts.has(source):
                drafts.delete(source)
            catalog.add(item.new_default_text or source, target)
        else:
            catalog.edit(source, item.target_for(locale), item.new_default_text)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def all_items(self) -> Dict[str, List[str]]:
        """Drafts (no locales) merged with committed translations; committed entries win."""
        items: Dict[str, List[str]] = {source: [] for source in DraftStore.all(self.context)}
        items.update(Catalog.all_translates(self.context))
        return items

    def get_language_items(self, page: int = 1) -> Dict[str, List[str]]:
        """
        One page of source texts with their filled locales.

        Sorted by ascending number of filled locales, so the least
        translated texts come first. Pages hold LANGUAGE_ITEMS_PER_PAGE items.
        """
        if not page or page < 1:
            page = 1
        ordered = sorted(self.all_items().items(), key=lambda pair: len(pair[1]))
        start = (page - 1) * LANGUAGE_ITEMS_PER_PAGE
        return dict(ordered[start:start + LANGUAGE_ITEMS_PER_PAGE])

    def get_language_text(self, locale: str, source: str) -> str:
        return Catalog(self.context, locale).get(source)

    def fill_state(self, source: str) -> FillState:
        filled = Catalog.all_translates(self.context).get(source, [])
        return classify_fill(filled, self.context.accepted_locales)
