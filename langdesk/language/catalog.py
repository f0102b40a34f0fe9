"""
Translation Catalog Module

Per-locale store of source text -> translated text, kept as a gettext
PO file (plus its compiled MO sibling) in the context's storage.

A catalog is loaded on construction, mutated in memory and written back
as a whole by save(). A source with an empty translation counts as
untranslated and is never written by add()/edit().
"""

from collections import OrderedDict
from typing import Dict, Iterator, List, Optional, Tuple

import polib

from langdesk.language.context import LanguageContext
from langdesk.logger import get_logger

logger = get_logger(__name__)


class Catalog:
    """Translations of one locale."""

    def __init__(self, context: LanguageContext, locale: str):
        self.context = context
        self.locale = locale
        self._po = self._load(context, locale)

    # ------------------------------------------------------------------
    # Loading / saving
    # ------------------------------------------------------------------

    @staticmethod
    def _load(context: LanguageContext, locale: str) -> polib.POFile:
        raw = context.storage.read(context.catalog_file(locale))
        if not raw:
            po = polib.POFile(wrapwidth=0)
            po.metadata = Catalog._metadata(context, locale)
            return po
        return polib.pofile(raw.decode("utf-8"), encoding="utf-8", wrapwidth=0)

    @staticmethod
    def _metadata(context: LanguageContext, locale: str) -> Dict[str, str]:
        return {
            "Project-Id-Version": context.domain,
            "Language": locale,
            "MIME-Version": "1.0",
            "Content-Type": "text/plain; charset=UTF-8",
            "Content-Transfer-Encoding": "8bit",
        }

    def save(self):
        """
        Write the whole catalog (PO and MO) for this locale.

        Each file is replaced atomically, the MO file first. An empty catalog removes both
        files instead.

        Raises:
            StorageError: If a file cannot be written.
        """
        storage = self.context.storage
        po_name = self.context.catalog_file(self.locale, "po")
        mo_name = self.context.catalog_file(self.locale, "mo")

        if not len(self):
            storage.delete(po_name)
            storage.delete(mo_name)
            logger.debug(f"Catalog {self.locale} is empty, files removed")
            return

        self._po.metadata.setdefault("Language", self.locale)
        # PO is the file read back, so it is replaced last
        storage.write(mo_name, self._po.to_binary())
        storage.write(po_name, str(self._po).encode("utf-8"))
        logger.debug(f"Catalog {self.locale} saved ({len(self)} entries)")

    # ------------------------------------------------------------------
    # Entry operations
    # ------------------------------------------------------------------

    def _find(self, source: str) -> Optional[polib.POEntry]:
        return self._po.find(source, by="msgid")

    def has(self, source: str) -> bool:
        entry = self._find(source)
        return bool(entry and entry.msgstr)

    def get(self, source: str) -> str:
        entry = self._find(source)
        return entry.msgstr if entry else ""

    def add(self, source: str, target: str):
        """Insert a pair. No-op if source is already translated or either text is empty."""
        if not source or not target:
            return
        entry = self._find(source)
        if entry is not None:
            if entry.msgstr:
                return
            # Untranslated leftovers from a hand-edited file are replaced
            self._po.remove(entry)
        self._po.append(polib.POEntry(msgid=source, msgstr=target))

    def edit(self, source: str, target: Optional[str] = None, new_source: Optional[str] = None):
        """
        Replace the pair for source.

        Args:
            source: Current source text
            target: New translation; None keeps the current one
            new_source: Optional new source text (rename)

        The old pair is removed first; nothing is re-added when the
        resulting translation is empty.
        """
        if target is None:
            target = self.get(source)

        self.delete(source)

        if target:
            self.add(new_source or source, target)

    def delete(self, source: str):
        entry = self._find(source)
        if entry is not None:
            self._po.remove(entry)

    def entries(self) -> Iterator[Tuple[str, str]]:
        """Translated (source, target) pairs in file order."""
        for entry in self._po:
            if entry.msgid and entry.msgstr and not entry.obsolete:
                yield entry.msgid, entry.msgstr

    def __len__(self) -> int:
        return sum(1 for _ in self.entries())

    # ------------------------------------------------------------------
    # Cross-locale operations
    # ------------------------------------------------------------------

    @classmethod
    def all_translates(cls, context: LanguageContext) -> Dict[str, List[str]]:
        """
        Map every translated source text to the accepted locales that translate it.

        Locales are listed in accepted-locale order; sources in order of
        first appearance.
        """
        translates: Dict[str, List[str]] = OrderedDict()
        for locale in context.accepted_locales:
            for source, _ in cls(context, locale).entries():
                translates.setdefault(source, []).append(locale)
        return translates

    @classmethod
    def delete_all(cls, context: LanguageContext):
        """Remove every locale's catalog files."""
        prefix = f"{context.domain}-"
        for name in context.storage.list(prefix):
            if name.endswith(".po") or name.endswith(".mo"):
                context.storage.delete(name)
        logger.info("All catalogs deleted")
