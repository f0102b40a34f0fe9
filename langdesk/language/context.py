"""
Language Context

Explicit state shared by catalogs, drafts, the coordinator and the worker,
built once from configuration instead of being read from globals.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from langdesk.config import CATALOG_DOMAIN, get_languages_dir, load_config
from langdesk.core.storage import FileStorage


@dataclass
class LanguageContext:
    """Where catalogs live and which locales they cover."""

    storage: Any  # FileStorage or MemoryStorage
    accepted_locales: List[str] = field(default_factory=list)
    source_locale: str = "en_US"
    domain: str = CATALOG_DOMAIN

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]] = None, storage=None) -> "LanguageContext":
        config = config if config is not None else load_config()
        if storage is None:
            storage = FileStorage(get_languages_dir(config))
        return cls(
            storage=storage,
            accepted_locales=list(config.get("accepted_locales") or []),
            source_locale=config.get("source_locale") or "en_US",
        )

    def is_accepted(self, locale: str) -> bool:
        return locale in self.accepted_locales

    def catalog_file(self, locale: str, extension: str = "po") -> str:
        return f"{self.domain}-{locale}.{extension}"

    @property
    def draft_file(self) -> str:
        return f"{self.domain}-draft.json"
