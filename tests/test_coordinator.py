"""
Tests for applying edit batches across locales and listing language items.
"""

import pytest

from langdesk.core.exceptions import ValidationError
from langdesk.language.catalog import Catalog
from langdesk.language.coordinator import FillState, TranslationCoordinator, classify_fill
from langdesk.language.draft import DraftStore


def assert_drafts_untranslated(context):
    """No draft has a translation in any catalog."""
    translated = Catalog.all_translates(context)
    assert not [source for source in DraftStore.all(context) if source in translated]


class TestClassifyFill:
    """Fill state over the accepted locales."""

    def test_states(self):
        accepted = ["en_US", "tr_TR"]

        assert classify_fill([], accepted) == FillState.EMPTY
        assert classify_fill(["tr_TR"], accepted) == FillState.HALF_FILLED
        assert classify_fill(["tr_TR", "en_US"], accepted) == FillState.FILLED

    def test_locales_outside_accepted_do_not_count(self):
        assert classify_fill(["fr_FR"], ["en_US"]) == FillState.EMPTY


class TestApplyBatch:
    """Per-locale edit processing."""

    def test_committing_a_new_translation_promotes_the_draft(self, context, add_drafts):
        add_drafts("Hello")
        coordinator = TranslationCoordinator(context)

        coordinator.apply_batch(changed_items={"Hello": {"en_US": "Hello", "is_new": True}})

        assert DraftStore.all(context) == []
        assert Catalog(context, "en_US").get("Hello") == "Hello"
        assert not Catalog(context, "tr_TR").has("Hello")
        assert coordinator.fill_state("Hello") == FillState.HALF_FILLED

    def test_removed_targets_deletes_only_that_locale(self, context, add_translations):
        add_translations("en_US", {"Hello": "Hello", "Bye": "Bye"})
        add_translations("tr_TR", {"Bye": "Hoşça kal"})
        coordinator = TranslationCoordinator(context)

        coordinator.apply_batch(changed_items={"Bye": {"removed_targets": ["en_US"]}})

        assert not Catalog(context, "en_US").has("Bye")
        assert Catalog(context, "tr_TR").get("Bye") == "Hoşça kal"
        assert Catalog(context, "en_US").get("Hello") == "Hello"

    def test_removing_the_last_translation_drafts_the_text_again(self, context, add_translations):
        """Later locales see the earlier locale's save, so the text becomes a draft there."""
        add_translations("en_US", {"Hello": "Hello"})
        coordinator = TranslationCoordinator(context)

        coordinator.apply_batch(changed_items={"Hello": {"removed_targets": ["en_US"]}})

        assert not Catalog(context, "en_US").has("Hello")
        assert not Catalog(context, "tr_TR").has("Hello")
        assert Catalog.all_translates(context) == {}
        assert DraftStore.all(context) == ["Hello"]

    def test_new_item_without_translation_becomes_draft(self, context):
        coordinator = TranslationCoordinator(context)

        coordinator.apply_batch(changed_items={"Checkout": {"is_new": True}})

        assert DraftStore.all(context) == ["Checkout"]

    def test_renaming_a_draft(self, context, add_drafts):
        add_drafts("Helo", "Bye")
        coordinator = TranslationCoordinator(context)

        coordinator.apply_batch(changed_items={"Helo": {"new_default_text": "Hello"}})

        assert DraftStore.all(context) == ["Hello", "Bye"]

    def test_editing_an_existing_translation(self, context, add_translations):
        add_translations("en_US", {"Hello": "Hello"})
        add_translations("tr_TR", {"Hello": "Merhaba"})
        coordinator = TranslationCoordinator(context)

        coordinator.apply_batch(changed_items={"Hello": {"tr_TR": "Selam"}})

        assert Catalog(context, "tr_TR").get("Hello") == "Selam"
        assert Catalog(context, "en_US").get("Hello") == "Hello"

    def test_renaming_a_translated_text_keeps_translations(self, context, add_translations):
        add_translations("en_US", {"Helo": "Hello"})
        add_translations("tr_TR", {"Helo": "Merhaba"})
        coordinator = TranslationCoordinator(context)

        coordinator.apply_batch(changed_items={"Helo": {"new_default_text": "Hello"}})

        assert Catalog.all_translates(context) == {"Hello": ["en_US", "tr_TR"]}
        assert Catalog(context, "tr_TR").get("Hello") == "Merhaba"

    def test_translation_for_a_draft_without_is_new(self, context, add_drafts):
        add_drafts("Bye")
        coordinator = TranslationCoordinator(context)

        coordinator.apply_batch(changed_items={"Bye": {"tr_TR": "Hoşça kal"}})

        assert DraftStore.all(context) == []
        assert Catalog(context, "tr_TR").get("Bye") == "Hoşça kal"
        assert not Catalog(context, "en_US").has("Bye")

    def test_removed_items_prefers_the_draft(self, context, add_drafts, add_translations):
        add_drafts("Draft text")
        add_translations("tr_TR", {"Hello": "Merhaba"})
        coordinator = TranslationCoordinator(context)

        coordinator.apply_batch(removed_items=["Draft text", "Hello"])

        assert DraftStore.all(context) == []
        assert Catalog.all_translates(context) == {}

    def test_drafts_and_translations_stay_exclusive(self, context, add_drafts, add_translations):
        add_drafts("Hello", "Bye", "Cart")
        add_translations("tr_TR", {"Home": "Ana sayfa"})
        coordinator = TranslationCoordinator(context)

        coordinator.apply_batch(changed_items={
            "Hello": {"is_new": True, "tr_TR": "Merhaba"},
            "Bye": {"en_US": "Bye"},
            "Home": {"removed_targets": ["tr_TR"]},
            "Search": {"is_new": True},
        })
        assert_drafts_untranslated(context)

        coordinator.apply_batch(
            removed_items=["Cart"],
            changed_items={"Search": {"tr_TR": "Ara"}},
        )
        assert_drafts_untranslated(context)
        assert "Search" not in DraftStore.all(context)

    def test_empty_batch_touches_nothing(self, context, add_drafts):
        add_drafts("Hello")
        before = context.storage.read(context.draft_file)

        TranslationCoordinator(context).apply_batch([], {})

        assert context.storage.read(context.draft_file) == before

    def test_invalid_batch_mutates_nothing(self, context, add_drafts):
        add_drafts("Hello")
        coordinator = TranslationCoordinator(context)

        with pytest.raises(ValidationError):
            coordinator.apply({
                "removed_items": ["Hello"],
                "changed_items": {"Bye": {"fr_FR": "Au revoir"}},
            })

        assert DraftStore.all(context) == ["Hello"]

    def test_remove_all(self, context, add_drafts, add_translations):
        add_drafts("Hello")
        add_translations("tr_TR", {"Bye": "Hoşça kal"})
        coordinator = TranslationCoordinator(context)

        coordinator.apply({"remove_all": True})

        assert context.storage.list("") == []


class TestLanguageItems:
    """Listing for the language screen."""

    def test_items_sorted_by_fill_count(self, context, add_drafts, add_translations):
        add_translations("en_US", {"Full": "Full", "Half": "Half"})
        add_translations("tr_TR", {"Full": "Dolu"})
        add_drafts("Draft A", "Draft B")

        items = TranslationCoordinator(context).get_language_items(1)

        assert list(items.items()) == [
            ("Draft A", []),
            ("Draft B", []),
            ("Half", ["en_US"]),
            ("Full", ["en_US", "tr_TR"]),
        ]

    def test_pagination(self, context, add_drafts):
        add_drafts(*[f"Text {i}" for i in range(20)])
        coordinator = TranslationCoordinator(context)

        assert len(coordinator.get_language_items(1)) == 16
        assert list(coordinator.get_language_items(2)) == [f"Text {i}" for i in range(16, 20)]
        assert coordinator.get_language_items(0) == coordinator.get_language_items(1)
        assert coordinator.get_language_items(3) == {}

    def test_get_language_text(self, context, add_translations):
        add_translations("tr_TR", {"Hello": "Merhaba"})
        coordinator = TranslationCoordinator(context)

        assert coordinator.get_language_text("tr_TR", "Hello") == "Merhaba"
        assert coordinator.get_language_text("en_US", "Hello") == ""
