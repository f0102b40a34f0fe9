"""
Shared pytest fixtures for the langdesk tests.

Every test runs against its own sqlite file and, unless it asks for a
directory, against in-memory catalog storage.
"""

import os

# Keep test runs from writing logs/app.log
os.environ["LANGDESK_LOG_MODE"] = "off"

import pytest

from langdesk.core import database as db
from langdesk.core.storage import MemoryStorage
from langdesk.language.auto_translate import AutoTranslateController
from langdesk.language.catalog import Catalog
from langdesk.language.context import LanguageContext
from langdesk.language.draft import DraftStore
from langdesk.provider.exceptions import TranslationError

LOCALES = ["en_US", "tr_TR"]


class FakeTranslator:
    """
    Provider double.

    Returns "<text> [<target_language>]" unless a fixed translation is
    given, and raises TranslationError for the languages listed in failures.
    """

    def __init__(self, translations=None, failures=None, on_call=None):
        self.translations = translations or {}
        self.failures = set(failures or [])
        self.on_call = on_call
        self.calls = []

    def translate(self, source_language, target_language, text):
        self.calls.append((source_language, target_language, text))
        if self.on_call is not None:
            self.on_call(len(self.calls))
        if target_language in self.failures:
            raise TranslationError("provider unavailable", code="provider_http_error")
        return self.translations.get((target_language, text), f"{text} [{target_language}]")


@pytest.fixture(autouse=True)
def tmp_db(tmp_path, monkeypatch):
    """Point the database module at a fresh sqlite file."""
    db_file = tmp_path / "langdesk.db"
    monkeypatch.setattr(db, "DB_FILE", db_file)
    return db_file


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def context(storage):
    return LanguageContext(storage=storage, accepted_locales=list(LOCALES), source_locale="en_US")


@pytest.fixture
def controller(context):
    return AutoTranslateController(context)


@pytest.fixture
def translator():
    return FakeTranslator()


@pytest.fixture
def add_drafts(context):
    """Store drafts: add_drafts("Hello", "Bye")."""
    def _add(*sources):
        drafts = DraftStore(context)
        for source in sources:
            drafts.add(source)
        drafts.save()
        return drafts
    return _add


@pytest.fixture
def add_translations(context):
    """Store translations: add_translations("tr_TR", {"Hello": "Merhaba"})."""
    def _add(locale, pairs):
        catalog = Catalog(context, locale)
        for source, target in pairs.items():
            catalog.add(source, target)
        catalog.save()
        return catalog
    return _add
