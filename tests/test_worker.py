"""
Tests for the auto-translate worker.
"""

from langdesk.core.cancellation import CancelToken
from langdesk.language.auto_translate import AutoTranslateController
from langdesk.language.catalog import Catalog
from langdesk.language.draft import DraftStore
from langdesk.language.progress import TranslateProgress
from langdesk.language.worker import TranslateWorker

from conftest import FakeTranslator


class RecordingController(AutoTranslateController):
    """Controller keeping every progress record the worker writes."""

    def __init__(self, context):
        super().__init__(context)
        self.history = []

    def set_status(self, progress):
        self.history.append((progress.size_translated_translates, progress.size_target_translates))
        super().set_status(progress)


def configure(controller, only_draft=True, selected_locales=None):
    controller.save_data({
        "only_draft": only_draft,
        "selected_locales": selected_locales or [],
        "is_translating": True,
    })


def make_worker(context, controller, translator, **kwargs):
    return TranslateWorker(context, controller, translator, delay_seconds=0, **kwargs)


class TestWorkerRun:
    """Full runs of the translate job."""

    def test_draft_translated_into_every_locale(self, context, controller, translator, add_drafts):
        add_drafts("Hello")
        configure(controller)

        result = make_worker(context, controller, translator).run(CancelToken())

        assert translator.calls == [("en", "en", "Hello"), ("en", "tr", "Hello")]
        assert DraftStore.all(context) == []
        assert Catalog(context, "en_US").get("Hello") == "Hello [en]"
        assert Catalog(context, "tr_TR").get("Hello") == "Hello [tr]"
        assert result["size_target_translates"] == 1
        assert result["size_translated_translates"] == 1
        assert not result["cancelled"]
        assert not controller.is_running()
        assert controller.get_status() is None

    def test_provider_error_skips_only_that_locale(self, context, controller, add_drafts):
        add_drafts("Hello")
        configure(controller)
        translator = FakeTranslator(failures={"tr"})

        result = make_worker(context, controller, translator).run(CancelToken())

        assert len(translator.calls) == 2
        assert Catalog(context, "en_US").get("Hello") == "Hello [en]"
        assert not Catalog(context, "tr_TR").has("Hello")
        assert result["size_translated_translates"] == 1
        assert result["failed_items"] == [
            {"source": "Hello", "locale": "tr_TR", "error": "provider unavailable"},
        ]

    def test_stop_during_run_keeps_earlier_writes(self, context, add_drafts):
        add_drafts("First", "Second")
        controller = AutoTranslateController(context)
        configure(controller)
        translator = FakeTranslator(on_call=lambda count: controller.stop())

        result = make_worker(context, controller, translator).run(CancelToken())

        assert len(translator.calls) == 1
        assert result["cancelled"]
        assert Catalog(context, "en_US").get("First") == "First [en]"
        assert DraftStore.all(context) == ["Second"]
        assert not controller.is_running()
        assert controller.get_status() is None

    def test_cancelled_token_stops_before_first_text(self, context, controller, translator, add_drafts):
        add_drafts("Hello")
        configure(controller)
        token = CancelToken()
        token.cancel()

        result = make_worker(context, controller, translator).run(token)

        assert translator.calls == []
        assert result["cancelled"]
        assert not controller.is_running()

    def test_progress_is_monotonic(self, context, add_drafts):
        add_drafts("One", "Two", "Three")
        controller = RecordingController(context)
        configure(controller)

        make_worker(context, controller, FakeTranslator(failures={"en"})).run(CancelToken())

        translated = [done for done, _ in controller.history]
        assert translated == sorted(translated)
        assert all(done <= target for done, target in controller.history)
        assert controller.history[-1] == (3, 3)

    def test_partially_translated_texts_when_not_only_draft(self, context, controller, translator,
                                                            add_translations):
        add_translations("en_US", {"Hello": "Hello", "Done": "Done"})
        add_translations("tr_TR", {"Done": "Bitti"})
        configure(controller, only_draft=False)

        result = make_worker(context, controller, translator).run(CancelToken())

        assert translator.calls == [("en", "tr", "Hello")]
        assert Catalog(context, "tr_TR").get("Hello") == "Hello [tr]"
        assert Catalog(context, "tr_TR").get("Done") == "Bitti"
        assert result["size_target_translates"] == 1

    def test_only_draft_ignores_partial_translations(self, context, controller, translator,
                                                     add_translations):
        add_translations("en_US", {"Hello": "Hello"})
        configure(controller, only_draft=True)

        result = make_worker(context, controller, translator).run(CancelToken())

        assert translator.calls == []
        assert result["size_target_translates"] == 0

    def test_selected_locales_limit_the_run(self, context, controller, translator, add_drafts):
        add_drafts("Hello")
        configure(controller, selected_locales=["tr_TR"])

        make_worker(context, controller, translator).run(CancelToken())

        assert translator.calls == [("en", "tr", "Hello")]
        assert not Catalog(context, "en_US").has("Hello")
        assert DraftStore.all(context) == []

    def test_resumes_recorded_progress(self, context, controller, translator, add_drafts):
        add_drafts("Hello")
        configure(controller)
        controller.set_status(TranslateProgress(size_target_translates=5, size_translated_translates=2))

        result = make_worker(context, controller, translator).run(CancelToken())

        assert result["size_target_translates"] == 5
        assert result["size_translated_translates"] == 3
        assert controller.get_status() is None

    def test_heartbeat_before_every_provider_call(self, context, controller, translator, add_drafts):
        add_drafts("One", "Two")
        configure(controller)
        beats = []

        make_worker(context, controller, translator, heartbeat=lambda: beats.append(1)).run(CancelToken())

        assert len(beats) == len(translator.calls) == 4

    def test_lost_lease_stops_without_touching_job_state(self, context, controller, translator, add_drafts):
        add_drafts("One", "Two", "Three")
        configure(controller)
        controller.set_status(TranslateProgress(size_target_translates=3))
        beats = iter([True, True])

        result = make_worker(
            context, controller, translator, heartbeat=lambda: next(beats, False),
        ).run(CancelToken())

        assert len(translator.calls) == 2
        assert result["cancelled"]
        assert result["lease_lost"]
        assert controller.is_running()
        assert controller.get_status().size_translated_translates == 1

    def test_unexpected_provider_exception_is_skipped(self, context, controller, add_drafts):
        add_drafts("Hello")
        configure(controller)

        class FlakyTranslator(FakeTranslator):
            def translate(self, source_language, target_language, text):
                if target_language == "en":
                    self.calls.append((source_language, target_language, text))
                    raise RuntimeError("connection reset")
                return super().translate(source_language, target_language, text)

        translator = FlakyTranslator()
        result = make_worker(context, controller, translator).run(CancelToken())

        assert [call[1] for call in translator.calls] == ["en", "tr"]
        assert Catalog(context, "tr_TR").get("Hello") == "Hello [tr]"
        assert DraftStore.all(context) == []
        assert result["failed_items"] == [
            {"source": "Hello", "locale": "en_US", "error": "connection reset"},
        ]
        assert not controller.is_running()


class TestUpdateTranslate:
    def test_stores_translation_and_clears_draft(self, context, controller, translator, add_drafts):
        add_drafts("Hello", "Bye")
        worker = make_worker(context, controller, translator)

        worker.update_translate("tr_TR", "Hello", "Merhaba")

        assert Catalog(context, "tr_TR").get("Hello") == "Merhaba"
        assert DraftStore.all(context) == ["Bye"]
