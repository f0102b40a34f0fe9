"""
Auto-Translate Worker Module

Long running job that machine-translates pending source texts:
- Collect drafts (and, unless only_draft, partially translated texts)
- Translate each missing (text, locale) pair through the provider
- Save every result right away and count finished texts in the progress record
- Stop at the next check point once the job is switched off

Provider failures are logged and skipped. Whatever ends the loop, the job
is finalized: the persisted flag is switched off and the progress record
cleared. The one exception is a lost lease: another worker owns the job
by then, so its flag and progress are left alone.
"""

import time
from typing import Any, Callable, Dict, List, Optional

from langdesk import language_codes as lc
from langdesk.core.cancellation import CancelToken
from langdesk.language.auto_translate import AutoTranslateController
from langdesk.language.catalog import Catalog
from langdesk.language.context import LanguageContext
from langdesk.language.coordinator import locked_locale
from langdesk.language.draft import DraftStore
from langdesk.language.progress import TranslateProgress
from langdesk.logger import get_logger

logger = get_logger(__name__)


class TranslateWorker:
    """
    Runs one auto-translate job to completion or cancellation.

    Args:
        context: Catalog location and accepted locales
        controller: Persisted job flag and progress record
        translator: Object with translate(source_language, target_language, text)
        delay_seconds: Pause after each successful provider call
        heartbeat: Called before every provider call to renew the job lease;
            returning False means the lease was lost and the run stops
    """

    def __init__(
        self,
        context: LanguageContext,
        controller: AutoTranslateController,
        translator,
        delay_seconds: float = 1.0,
        heartbeat: Optional[Callable[[], Any]] = None,
    ):
        self.context = context
        self.controller = controller
        self.translator = translator
        self.delay_seconds = delay_seconds
        self.heartbeat = heartbeat
        self.succeeded = 0
        self.failed: List[Dict[str, str]] = []
        self.lease_lost = False

    def _should_stop(self, token: CancelToken) -> bool:
        return self.lease_lost or token.cancelled or not self.controller.is_running()

    def _renew_lease(self) -> bool:
        if self.heartbeat is not None and self.heartbeat() is False:
            logger.warning("Auto translate lease lost, stopping without touching the job state")
            self.lease_lost = True
        return not self.lease_lost

    def resolve_target_locales(self, selected_locales: List[str]) -> List[str]:
        return list(selected_locales) if selected_locales else list(self.context.accepted_locales)

    def build_targets(self, only_draft: bool, target_locales: List[str]) -> Dict[str, List[str]]:
        """Source texts still missing at least one target locale, with their filled locales."""
        targets: Dict[str, List[str]] = {source: [] for source in DraftStore.all(self.context)}
        if not only_draft:
            targets.update(Catalog.all_translates(self.context))

        wanted = set(target_locales)
        return {
            source: filled for source, filled in targets.items()
            if not wanted.issubset(filled)
        }

    def run(self, token: Optional[CancelToken] = None) -> Dict[str, Any]:
        """
        Execute the job with the persisted configuration.

        Returns:
            Dict with progress counters, succeeded/failed call counts and
            whether the job was cancelled
        """
        token = token or CancelToken()
        start_time = time.time()
        data = self.controller.get_data()

        target_locales = self.resolve_target_locales(data["selected_locales"])
        targets = self.build_targets(data["only_draft"], target_locales)

        progress = self.controller.get_status()
        if progress is None:
            progress = TranslateProgress(size_target_translates=len(targets))
        else:
            logger.info(
                "Resuming auto translate at %d/%d",
                progress.size_translated_translates,
                progress.size_target_translates,
            )
        self.controller.set_status(progress)

        logger.info(
            "Auto translate started: %d texts, locales=%s, only_draft=%s",
            len(targets),
            target_locales,
            data["only_draft"],
        )

        source_language = lc.locale_to_language(self.context.source_locale)
        cancelled = False

        for source, filled_locales in targets.items():
            if self._should_stop(token):
                cancelled = True
                break

            remaining = [locale for locale in target_locales if locale not in filled_locales]
            for locale in remaining:
                if self._should_stop(token) or not self._renew_lease():
                    cancelled = True
                    break
                if not self._translate_one(source_language, locale, source):
                    continue
                if token.sleep(self.delay_seconds) or self._should_stop(token):
                    cancelled = True
                    break

            if cancelled:
                break

            progress.advance()
            self.controller.set_status(progress)

        self._finalize(progress, cancelled)

        elapsed_time = time.time() - start_time
        logger.info(
            "Auto translate %s in %.1f seconds (%d/%d texts, %d calls ok, %d failed)",
            "cancelled" if cancelled else "completed",
            elapsed_time,
            progress.size_translated_translates,
            progress.size_target_translates,
            self.succeeded,
            len(self.failed),
        )
        return {
            "size_target_translates": progress.size_target_translates,
            "size_translated_translates": progress.size_translated_translates,
            "succeeded": self.succeeded,
            "failed_items": self.failed,
            "cancelled": cancelled,
            "lease_lost": self.lease_lost,
            "elapsed_time": elapsed_time,
        }

    def _translate_one(self, source_language: str, locale: str, source: str) -> bool:
        target_language = lc.locale_to_language(locale)
        try:
            translated = self.translator.translate(source_language, target_language, source)
        except Exception as e:
            logger.warning(f"Translation of '{source[:50]}' to {locale} failed: {type(e).__name__}: {e}")
            self.failed.append({"source": source, "locale": locale, "error": str(e)})
            return False
        if not translated:
            logger.warning(f"Empty translation of '{source[:50]}' to {locale}, skipped")
            self.failed.append({"source": source, "locale": locale, "error": "empty translation"})
            return False
        self.update_translate(locale, source, translated)
        self.succeeded += 1
        return True

    def update_translate(self, locale: str, source: str, translated_text: str):
        """Store a machine translation and promote the text out of the drafts."""
        with locked_locale(self.context, locale):
            catalog = Catalog(self.context, locale)
            catalog.edit(source, translated_text)
            catalog.save()

            drafts = DraftStore(self.context)
            if drafts.has(source):
                drafts.delete(source)
                drafts.save()

    def _finalize(self, progress: TranslateProgress, cancelled: bool):
        if self.lease_lost:
            return
        if progress.is_complete:
            logger.info("All %d texts processed", progress.size_target_translates)
        elif not cancelled:
            # Resumed runs can see fewer texts than the recorded target
            logger.warning(
                "Auto translate ended at %d/%d texts",
                progress.size_translated_translates,
                progress.size_target_translates,
            )
        self.controller.set_translating(False)
        self.controller.clear_status()
