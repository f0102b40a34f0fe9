"""
Auto-Translate Controller Module

Owns the persisted on/off state of the auto-translate job, its
configuration and its progress record. Both live in sqlite app_config
rows and are re-read on every call, because the worker thread updates
them concurrently.

The worker itself is in language/worker.py; it is launched through a
job scheduler (web/tasks.py) under the job name TRANSLATE_JOB.
"""

import copy
import json
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from langdesk.core import database as db
from langdesk.core.exceptions import AutoTranslateBusyError, ValidationError
from langdesk.language.context import LanguageContext
from langdesk.language.progress import TranslateProgress
from langdesk.logger import get_logger

logger = get_logger(__name__)

TRANSLATE_JOB = "translate"
DATA_OPTION = "auto_translate"
STATUS_OPTION = "auto_translate_status"

DEFAULT_DATA = {
    "only_draft": True,
    "selected_locales": [],
    "is_translating": False,
}


class AutoTranslateState(str, Enum):
    IDLE = "idle"
    CONFIGURING = "configuring"
    RUNNING = "running"
    STOPPING = "stopping"


class AutoTranslateController:
    """Start, stop and observe the auto-translate job."""

    def __init__(self, context: LanguageContext, scheduler=None):
        self.context = context
        self.scheduler = scheduler

    # ------------------------------------------------------------------
    # Persisted configuration
    # ------------------------------------------------------------------

    def get_data(self) -> Dict[str, Any]:
        data = copy.deepcopy(DEFAULT_DATA)
        raw = db.get_app_config(DATA_OPTION)
        if raw:
            try:
                stored = json.loads(raw)
            except json.JSONDecodeError as e:
                logger.error(f"Auto-translate options are corrupted, using defaults: {e}")
                stored = {}
            if isinstance(stored, dict):
                data.update({k: v for k, v in stored.items() if k in DEFAULT_DATA})
        data["only_draft"] = bool(data["only_draft"])
        data["is_translating"] = bool(data["is_translating"])
        data["selected_locales"] = list(data["selected_locales"] or [])
        return data

    def save_data(self, data: Dict[str, Any]):
        merged = copy.deepcopy(DEFAULT_DATA)
        merged.update({k: v for k, v in data.items() if k in DEFAULT_DATA})
        db.set_app_config(DATA_OPTION, json.dumps(merged, ensure_ascii=False))

    def is_running(self) -> bool:
        return self.get_data()["is_translating"]

    def set_translating(self, is_translating: bool):
        data = self.get_data()
        data["is_translating"] = is_translating
        self.save_data(data)

    # ------------------------------------------------------------------
    # Progress record
    # ------------------------------------------------------------------

    def get_status(self) -> Optional[TranslateProgress]:
        raw = db.get_app_config(STATUS_OPTION)
        if not raw:
            return None
        try:
            return TranslateProgress.from_dict(json.loads(raw))
        except (json.JSONDecodeError, TypeError, ValueError) as e:
            logger.error(f"Auto-translate status is corrupted, ignoring it: {e}")
            return None

    def set_status(self, progress: TranslateProgress):
        db.set_app_config(STATUS_OPTION, json.dumps(progress.to_dict()))

    def clear_status(self):
        db.delete_app_config(STATUS_OPTION)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def validate_locales(self, selected_locales: Iterable[str]) -> List[str]:
        selected = list(dict.fromkeys(selected_locales or []))
        unknown = [locale for locale in selected if not self.context.is_accepted(locale)]
        if unknown:
            raise ValidationError(
                f"Unknown locale(s): {', '.join(unknown)}",
                code="unknown_locale",
                details={"locales": unknown},
            )
        return selected

    def start(self, only_draft: bool = True, selected_locales: Optional[Iterable[str]] = None):
        """
        Persist the job configuration and launch the worker in the background.

        Raises:
            ValidationError: If a selected locale is not accepted
            AutoTranslateBusyError: If a worker already holds the job lease
        """
        selected = self.validate_locales(selected_locales or [])

        if self.scheduler is not None and self.scheduler.is_active(TRANSLATE_JOB):
            raise AutoTranslateBusyError("Auto translate is already running", code="auto_translate_busy")

        previous = self.get_data()
        self.save_data({
            "only_draft": bool(only_draft),
            "selected_locales": selected,
            "is_translating": True,
        })
        logger.info(
            "Auto translate requested (only_draft=%s, locales=%s)",
            bool(only_draft),
            selected or "all",
        )

        if self.scheduler is not None and not self.scheduler.schedule(TRANSLATE_JOB):
            # Lost the race for the lease; the running job keeps its options
            self.save_data(previous)
            raise AutoTranslateBusyError("Auto translate is already running", code="auto_translate_busy")

    def stop(self):
        """Turn the job off and drop its progress. The worker notices at its next check."""
        self.set_translating(False)
        self.clear_status()
        if self.scheduler is not None:
            self.scheduler.cancel(TRANSLATE_JOB)
        logger.info("Auto translate stopped")

    def get_state(self) -> AutoTranslateState:
        worker_active = self.scheduler is not None and self.scheduler.is_active(TRANSLATE_JOB)
        if not self.is_running():
            return AutoTranslateState.STOPPING if worker_active else AutoTranslateState.IDLE
        if self.get_status() is None:
            return AutoTranslateState.CONFIGURING
        return AutoTranslateState.RUNNING

    def polling_status(self) -> Dict[str, Any]:
        """Status payload polled by the admin UI."""
        status = self.get_status()
        return {
            "is_translating": self.is_running(),
            "state": self.get_state().value,
            "size": {
                "translated_translates": status.size_translated_translates,
                "target_translates": status.size_target_translates,
            } if status else {},
        }
