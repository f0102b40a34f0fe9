"""
Language Service

Facade over the coordinator, the auto-translate controller and the worker,
used by the web routes. Configuration is re-read on every call so that
settings changes (accepted locales, provider, delay) apply without a restart.
"""

from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from langdesk import language_codes as lc
from langdesk.config import get_languages_dir, load_config
from langdesk.core.cancellation import CancelToken
from langdesk.core.exceptions import ValidationError
from langdesk.core.storage import FileStorage
from langdesk.language.auto_translate import TRANSLATE_JOB, AutoTranslateController
from langdesk.language.catalog import Catalog
from langdesk.language.context import LanguageContext
from langdesk.language.coordinator import TranslationCoordinator, classify_fill
from langdesk.language.draft import DraftStore
from langdesk.language.edits import LanguageBatch
from langdesk.language.worker import TranslateWorker
from langdesk.logger import get_logger
from langdesk.provider.service import TranslatorService

logger = get_logger(__name__)


def _default_translator_factory(config: Dict[str, Any]):
    return TranslatorService(config)


class LanguageService:
    """
    Everything the language screen and the auto-translate job need.

    Args:
        storage: Fixed storage backend; by default a FileStorage per
            configured languages directory
        scheduler: JobScheduler running the auto-translate job; the job is
            registered on it
        translator_factory: Builds the provider from the current config
    """

    def __init__(self, storage=None, scheduler=None,
                 translator_factory: Optional[Callable[[Dict[str, Any]], Any]] = None):
        self._storage = storage
        self._file_storages: Dict[str, FileStorage] = {}
        self.scheduler = scheduler
        self.translator_factory = translator_factory or _default_translator_factory
        if scheduler is not None:
            scheduler.register(TRANSLATE_JOB, self.run_auto_translate)

    def _storage_for(self, config: Dict[str, Any]):
        if self._storage is not None:
            return self._storage
        directory = str(get_languages_dir(config))
        # One backend per directory, so its file locks are shared by all callers
        if directory not in self._file_storages:
            self._file_storages[directory] = FileStorage(directory)
        return self._file_storages[directory]

    def context(self, config: Optional[Dict[str, Any]] = None) -> LanguageContext:
        config = config if config is not None else load_config()
        return LanguageContext.from_config(config, storage=self._storage_for(config))

    def coordinator(self) -> TranslationCoordinator:
        return TranslationCoordinator(self.context())

    def controller(self, context: Optional[LanguageContext] = None) -> AutoTranslateController:
        return AutoTranslateController(context or self.context(), scheduler=self.scheduler)

    # ------------------------------------------------------------------
    # Language screen
    # ------------------------------------------------------------------

    def get_language_items(self, page: int = 1) -> List[Dict[str, Any]]:
        """One page of items as {text, locales, state} rows, least translated first."""
        context = self.context()
        items = TranslationCoordinator(context).get_language_items(page)
        return [
            {
                "text": source,
                "locales": locales,
                "state": classify_fill(locales, context.accepted_locales).value,
            }
            for source, locales in items.items()
        ]

    def get_language_text(self, locale: str, source: str) -> str:
        context = self.context()
        if not context.is_accepted(locale):
            raise ValidationError(
                f"Unknown locale: {locale}",
                code="unknown_locale",
                details={"locales": [locale]},
            )
        return TranslationCoordinator(context).get_language_text(locale, source)

    def apply(self, payload: Mapping[str, Any]) -> LanguageBatch:
        return self.coordinator().apply(payload)

    def apply_batch(self, removed_items: Optional[List[str]] = None,
                    changed_items: Optional[Mapping[str, Mapping[str, Any]]] = None) -> LanguageBatch:
        return self.coordinator().apply_batch(removed_items, changed_items)

    def apply_remove_all(self):
        self.coordinator().apply_remove_all()

    def search_languages(self, keyword: str = "", values: Optional[Iterable[str]] = None,
                         only_supported: bool = False,
                         include_current_locale: bool = False) -> List[Dict[str, str]]:
        context = self.context()
        return lc.search_locales(
            keyword=keyword,
            values=values,
            only_supported=only_supported,
            accepted_locales=context.accepted_locales,
            current_locale=context.source_locale,
            include_current_locale=include_current_locale,
        )

    # ------------------------------------------------------------------
    # Auto translate
    # ------------------------------------------------------------------

    def has_pending_texts(self, context: Optional[LanguageContext] = None) -> bool:
        context = context or self.context()
        return bool(DraftStore.all(context)) or bool(Catalog.all_translates(context))

    def start_auto_translate(self, only_draft: bool = True,
                             selected_locales: Optional[Iterable[str]] = None):
        """
        Start the job.

        Raises:
            ValidationError: Unknown locale, or nothing to translate
            AutoTranslateBusyError: A worker is already running
        """
        context = self.context()
        if not self.has_pending_texts(context):
            raise ValidationError("There is nothing to translate", code="nothing_to_translate")
        self.controller(context).start(only_draft=only_draft, selected_locales=selected_locales)

    def stop_auto_translate(self):
        self.controller().stop()

    def get_auto_translate_data(self) -> Dict[str, Any]:
        return self.controller().get_data()

    def get_auto_translate_status(self) -> Optional[Dict[str, int]]:
        status = self.controller().get_status()
        if status is None:
            return None
        return {
            "translated": status.size_translated_translates,
            "target": status.size_target_translates,
        }

    def polling_status(self) -> Dict[str, Any]:
        return self.controller().polling_status()

    def run_auto_translate(self, token: CancelToken, heartbeat: Optional[Callable[[], Any]] = None) -> Dict[str, Any]:
        """Job body executed by the scheduler on its worker thread."""
        config = load_config()
        context = self.context(config)
        controller = self.controller(context)
        token.bind(controller.is_running)
        try:
            worker = TranslateWorker(
                context,
                controller,
                self.translator_factory(config),
                delay_seconds=float(config["auto_translate"].get("delay_seconds", 1.0)),
                heartbeat=heartbeat,
            )
            return worker.run(token)
        except Exception:
            controller.set_translating(False)
            controller.clear_status()
            raise
