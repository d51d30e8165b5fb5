"""
Step metadata normalization.

Authoring tools have written step metadata in several shapes over time:
options as bare strings or as ``{id, text}`` objects, the correct answer as
an index, an option id or the option text, metadata stored as a JSON string,
and renamed keys (``audioUrl``/``audio_url``, ``back``/``back_text``).
Everything is mapped to the canonical payload models here, once, at load
time. Interaction logic never branches on the stored shape.
"""

import json
from typing import Any, Dict, List, Optional

from moono.exceptions import UnknownStepTypeError
from moono.kernel.models.content import LessonStep
from moono.logging_config import get_logger
from moono.schemas.content import (
    AudioContent,
    FlashcardContent,
    LessonStepSchema,
    QuizContent,
    QuizOption,
    ReadContent,
    StepContent,
    StepType,
)

logger = get_logger(__name__)

DEFAULT_FLASHCARD_FRONT = "Word"


def parse_metadata(raw: Any) -> Dict[str, Any]:
    """
    Return step metadata as a dict.

    Accepts a dict, a JSON-encoded object string, or nothing. Anything else,
    including invalid JSON, degrades to an empty dict.
    """
    if raw is None:
        return {}
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            logger.warning("Step metadata is not valid JSON; ignoring it")
            return {}
    if isinstance(raw, dict):
        return raw
    logger.warning("Step metadata is not an object; ignoring it", extra={"metadata_type": type(raw).__name__})
    return {}


def _as_text(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _first_text(*values: Any) -> Optional[str]:
    """First value that is non-empty text."""
    for value in values:
        text = _as_text(value)
        if text:
            return text
    return None


def _expand_newlines(text: str) -> str:
    # Some rows store literal "\n" sequences instead of newlines
    return text.replace("\\n", "\n")


def normalize_options(raw_options: Any) -> List[QuizOption]:
    """
    Map legacy bare-string options and ``{id, text}`` objects to QuizOption.

    Options without an id get ``opt-<index>``; a generated id never reuses an
    id given explicitly elsewhere in the list.
    """
    if not isinstance(raw_options, list):
        return []

    taken = {
        _as_text(raw.get("id"))
        for raw in raw_options
        if isinstance(raw, dict) and _as_text(raw.get("id"))
    }

    def fallback_id(index: int) -> str:
        candidate, suffix = f"opt-{index}", 1
        while candidate in taken:
            candidate = f"opt-{index}-{suffix}"
            suffix += 1
        taken.add(candidate)
        return candidate

    options: List[QuizOption] = []
    for index, raw in enumerate(raw_options):
        if isinstance(raw, str):
            options.append(QuizOption(id=fallback_id(index), text=raw))
        elif isinstance(raw, dict):
            option_id = _as_text(raw.get("id")) or fallback_id(index)
            options.append(QuizOption(id=option_id, text=_as_text(raw.get("text")) or ""))
        else:
            logger.warning("Skipping malformed quiz option", extra={"option_index": index})
    return options


def resolve_correct_option_id(metadata: Dict[str, Any], options: List[QuizOption]) -> Optional[str]:
    """
    Resolve the canonical correct option id.

    ``correct_option_id`` wins over the legacy ``correctAnswer``. A legacy
    integer is an index into the options; a legacy string is an option id or,
    failing that, an option's text. Returns None when nothing resolves to an
    existing option.
    """
    option_ids = [option.id for option in options]

    candidate = metadata.get("correct_option_id")
    if candidate is None:
        candidate = metadata.get("correctAnswer")

    if isinstance(candidate, bool) or candidate is None:
        return None

    if isinstance(candidate, int):
        if 0 <= candidate < len(options):
            return options[candidate].id
        return None

    if isinstance(candidate, str):
        if candidate in option_ids:
            return candidate
        for option in options:
            if option.text == candidate:
                return option.id

    return None


def normalize_payload(
    step_type: StepType,
    content: Optional[str],
    metadata: Dict[str, Any],
) -> StepContent:
    """Build the canonical payload for one step."""
    if step_type == StepType.READ:
        body = _first_text(content, metadata.get("text"), metadata.get("body")) or ""
        keyword = _as_text(metadata.get("image_keyword"))
        return ReadContent(
            body=_expand_newlines(body),
            image_keyword=keyword.strip() if keyword and keyword.strip() else None,
        )

    if step_type == StepType.QUIZ:
        options = normalize_options(metadata.get("options"))
        return QuizContent(
            question=_first_text(metadata.get("question"), content) or "",
            options=options,
            correct_option_id=resolve_correct_option_id(metadata, options),
            explanation=_first_text(metadata.get("explanation")),
        )

    if step_type == StepType.FLASHCARD:
        return FlashcardContent(
            front_text=_first_text(metadata.get("front_text"), content) or DEFAULT_FLASHCARD_FRONT,
            back_text=_first_text(metadata.get("back_text"), metadata.get("back")) or "",
        )

    url = _first_text(metadata.get("audio_url"), metadata.get("audioUrl"))
    description = _first_text(metadata.get("text"), metadata.get("body"), content) or ""
    return AudioContent(
        audio_url=url.strip() if url and url.strip() else None,
        description=_expand_newlines(description),
    )


def normalize_step(row: LessonStep) -> LessonStepSchema:
    """
    Convert a stored step row into a normalized LessonStepSchema.

    Raises:
        UnknownStepTypeError: If the row's type tag is not a known step type
    """
    try:
        step_type = StepType(row.type)
    except ValueError:
        raise UnknownStepTypeError(
            f"Unknown step type: {row.type}",
            context={"step_id": row.id, "lesson_id": row.lesson_id},
        ) from None

    metadata = parse_metadata(row.step_metadata)
    payload = normalize_payload(step_type, row.content, metadata)

    if isinstance(payload, QuizContent) and not payload.is_configured:
        logger.warning(
            "Quiz step has no resolvable correct option",
            extra={"step_id": row.id, "lesson_id": row.lesson_id},
        )

    return LessonStepSchema(
        id=row.id,
        lesson_id=row.lesson_id,
        order_index=row.order_index,
        type=step_type,
        title=row.title,
        content=row.content,
        payload=payload,
    )
