"""
Language module - Catalogs, drafts and auto-translate

This module provides:
- Catalog / DraftStore: Per-locale translations and untranslated texts
- TranslationCoordinator: Applies admin edit batches across locales
- AutoTranslateController / TranslateWorker: Background machine translation
- LanguageService: Facade used by the web routes
"""

from langdesk.language.context import LanguageContext
from langdesk.language.catalog import Catalog
from langdesk.language.draft import DraftStore
from langdesk.language.edits import (
    ChangedItem,
    CommitTranslation,
    LanguageBatch,
    MarkNew,
    RemoveTargets,
    Rename,
    parse_batch,
)
from langdesk.language.coordinator import (
    FillState,
    TranslationCoordinator,
    classify_fill,
)
from langdesk.language.progress import TranslateProgress
from langdesk.language.auto_translate import (
    TRANSLATE_JOB,
    AutoTranslateController,
    AutoTranslateState,
)
from langdesk.language.worker import TranslateWorker
from langdesk.language.service import LanguageService
