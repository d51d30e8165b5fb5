"""Unit tests for step metadata normalization."""

import pytest

from moono.engines.content.normalizer import (
    normalize_options,
    normalize_payload,
    normalize_step,
    parse_metadata,
    resolve_correct_option_id,
)
from moono.exceptions import LoadError, UnknownStepTypeError
from moono.kernel.models.content import LessonStep
from moono.schemas.content import (
    AudioContent,
    FlashcardContent,
    QuizContent,
    QuizOption,
    ReadContent,
    StepType,
)


class TestParseMetadata:
    """Tests for metadata decoding."""

    def test_dict_passthrough(self):
        assert parse_metadata({"a": 1}) == {"a": 1}

    def test_json_string(self):
        assert parse_metadata('{"question": "Q?"}') == {"question": "Q?"}

    def test_none_and_invalid(self):
        assert parse_metadata(None) == {}
        assert parse_metadata("{not json") == {}
        assert parse_metadata("[1, 2]") == {}
        assert parse_metadata(42) == {}


class TestQuizNormalization:
    """Tests for option and correct-answer shapes."""

    def test_bare_string_options_get_positional_ids(self):
        options = normalize_options(["Yes", "No"])
        assert options == [QuizOption(id="opt-0", text="Yes"), QuizOption(id="opt-1", text="No")]

    def test_object_options_keep_ids(self):
        options = normalize_options([{"id": "a", "text": "Yes"}, {"text": "No"}])
        assert [o.id for o in options] == ["a", "opt-1"]

    def test_generated_ids_avoid_explicit_ids(self):
        """A bare option at index 1 must not take the id of an explicit "opt-1"."""
        options = normalize_options([{"id": "opt-1", "text": "Yes"}, "No", "Maybe"])
        ids = [o.id for o in options]
        assert ids[0] == "opt-1"
        assert ids[1] != "opt-1"
        assert ids[2] == "opt-2"
        assert len(set(ids)) == 3

    def test_legacy_index_resolves_to_generated_id(self):
        options = normalize_options([{"id": "opt-1", "text": "Yes"}, "No"])
        assert resolve_correct_option_id({"correctAnswer": 1}, options) == options[1].id

    def test_malformed_options_skipped(self):
        assert normalize_options([None, "Yes"]) == [QuizOption(id="opt-1", text="Yes")]
        assert normalize_options("Yes") == []

    def test_canonical_correct_option_id(self):
        options = normalize_options([{"id": "a", "text": "x"}, {"id": "b", "text": "y"}])
        assert resolve_correct_option_id({"correct_option_id": "b"}, options) == "b"

    def test_canonical_wins_over_legacy(self):
        options = normalize_options([{"id": "a", "text": "x"}, {"id": "b", "text": "y"}])
        metadata = {"correct_option_id": "a", "correctAnswer": 1}
        assert resolve_correct_option_id(metadata, options) == "a"

    def test_legacy_index(self):
        options = normalize_options(["Yes", "No"])
        assert resolve_correct_option_id({"correctAnswer": 1}, options) == "opt-1"

    def test_legacy_index_out_of_range(self):
        options = normalize_options(["Yes", "No"])
        assert resolve_correct_option_id({"correctAnswer": 5}, options) is None

    def test_legacy_text_answer(self):
        options = normalize_options(["Yes", "No"])
        assert resolve_correct_option_id({"correctAnswer": "No"}, options) == "opt-1"

    def test_unresolvable_answer(self):
        options = normalize_options(["Yes", "No"])
        assert resolve_correct_option_id({"correctAnswer": "Maybe"}, options) is None
        assert resolve_correct_option_id({"correctAnswer": True}, options) is None
        assert resolve_correct_option_id({}, options) is None

    def test_quiz_payload(self):
        payload = normalize_payload(
            StepType.QUIZ,
            "fallback question",
            {
                "question": "What is a stock?",
                "options": [{"id": "a", "text": "A share"}, {"id": "b", "text": "A bond"}],
                "correct_option_id": "a",
                "explanation": "A stock is a share of ownership.",
            },
        )
        assert isinstance(payload, QuizContent)
        assert payload.question == "What is a stock?"
        assert payload.correct_option_id == "a"
        assert payload.is_configured is True
        assert payload.explanation == "A stock is a share of ownership."

    def test_quiz_question_falls_back_to_content(self):
        payload = normalize_payload(StepType.QUIZ, "From content", {"options": ["x"]})
        assert payload.question == "From content"
        assert payload.is_configured is False


class TestOtherPayloads:
    """Tests for read, flashcard and audio payloads."""

    def test_read_expands_literal_newlines(self):
        payload = normalize_payload(StepType.READ, "line one\\nline two", {"image_keyword": "money"})
        assert isinstance(payload, ReadContent)
        assert payload.body == "line one\nline two"
        assert payload.image_keyword == "money"

    def test_read_body_from_metadata(self):
        payload = normalize_payload(StepType.READ, None, {"text": "From metadata"})
        assert payload.body == "From metadata"
        assert payload.image_keyword is None

    def test_flashcard_legacy_back_key(self):
        payload = normalize_payload(StepType.FLASHCARD, "Equity", {"back": "Ownership"})
        assert isinstance(payload, FlashcardContent)
        assert payload.front_text == "Equity"
        assert payload.back_text == "Ownership"

    def test_flashcard_defaults(self):
        payload = normalize_payload(StepType.FLASHCARD, None, {})
        assert payload.front_text == "Word"
        assert payload.back_text == ""

    def test_flashcard_canonical_keys_win(self):
        payload = normalize_payload(
            StepType.FLASHCARD, "content", {"front_text": "Front", "back_text": "Back", "back": "old"}
        )
        assert (payload.front_text, payload.back_text) == ("Front", "Back")

    def test_audio_legacy_url_key(self):
        payload = normalize_payload(StepType.AUDIO, "Listen", {"audioUrl": " https://cdn/a.mp3 "})
        assert isinstance(payload, AudioContent)
        assert payload.audio_url == "https://cdn/a.mp3"
        assert payload.description == "Listen"

    def test_audio_without_locator(self):
        payload = normalize_payload(StepType.AUDIO, None, {"audio_url": "  "})
        assert payload.audio_url is None


class TestNormalizeStep:
    """Tests for row conversion."""

    def test_row_with_json_string_metadata(self):
        row = LessonStep(
            id=5,
            lesson_id=2,
            order_index=1,
            type="quiz",
            content=None,
            step_metadata='{"question": "Q?", "options": ["A", "B"], "correctAnswer": 0}',
        )
        step = normalize_step(row)
        assert step.type == StepType.QUIZ
        assert step.payload.question == "Q?"
        assert step.payload.correct_option_id == "opt-0"

    def test_unknown_type_raises_load_error(self):
        row = LessonStep(id=5, lesson_id=2, order_index=1, type="video", step_metadata={})
        with pytest.raises(UnknownStepTypeError) as exc_info:
            normalize_step(row)
        assert isinstance(exc_info.value, LoadError)
        assert exc_info.value.context["step_id"] == 5
