"""Seed a small demo course, walk its first lesson, and print the paths."""
import asyncio

from sqlalchemy import select

from moono.config import get_settings
from moono.database import async_session_maker, close_db, init_db
from moono.engines.content import SqlContentRepository
from moono.engines.interaction import AudioHandle, AudioTransport
from moono.engines.progress import PathService, SqlProgressStore
from moono.kernel.identity import AnonymousIdentityService
from moono.kernel.models import Lesson, LessonStep, Unit
from moono.logging_config import configure_logging
from moono.orchestration import CompletionSequence, StepRunner


class SilentHandle(AudioHandle):
    async def play(self): pass
    async def pause(self): pass
    async def stop(self): pass
    async def release(self): pass
    def set_status_callback(self, callback): pass


class SilentTransport(AudioTransport):
    async def load(self, locator):
        print(f"  (audio) would play {locator}")
        return SilentHandle()


DEMO_COURSE = [
    ("Money Basics", [
        ("What is money?", [
            ("read", "Money is a **medium of exchange**.\\nIt stores value too.", {"image_keyword": "money"}),
            ("flashcard", "Liquidity", {"back": "How quickly an asset turns into cash"}),
            ("quiz", None, {
                "question": "Which is most liquid?",
                "options": ["A house", "Cash", "A painting"],
                "correctAnswer": 1,
                "explanation": "Cash is already money.",
            }),
        ]),
        ("Saving", [
            ("audio", "Listen to the saving tip.", {"audioUrl": "https://example.invalid/saving.mp3"}),
            ("read", "Pay yourself first.", {"image_keyword": "growth"}),
        ]),
    ]),
    ("Investing", [
        ("Stocks", [
            ("read", "A stock is a share of a company.", {"image_keyword": "stock"}),
        ]),
    ]),
]


async def seed(session):
    existing = await session.execute(select(Unit.id).limit(1))
    if existing.scalar_one_or_none() is not None:
        print("Content already present, skipping seed")
        return
    for unit_index, (unit_title, lessons) in enumerate(DEMO_COURSE):
        unit = Unit(title=unit_title, order_index=unit_index)
        for lesson_index, (lesson_title, steps) in enumerate(lessons):
            lesson = Lesson(title=lesson_title, sort_order=lesson_index)
            lesson.steps = [
                LessonStep(order_index=i, type=kind, content=content, step_metadata=meta)
                for i, (kind, content, meta) in enumerate(steps)
            ]
            unit.lessons.append(lesson)
        session.add(unit)
    await session.commit()
    print(f"Seeded {len(DEMO_COURSE)} units")


async def print_paths(paths):
    for item in await paths.unit_path():
        print(f"[{item.status.value:9}] {item.unit.title} ({item.completed_lessons}/{item.total_lessons})")
        lesson_path = await paths.lesson_path(item.unit.id)
        for lesson_item in lesson_path.items:
            print(f"    [{lesson_item.status.value:9}] {lesson_item.lesson.title}")


async def main():
    settings = get_settings()
    configure_logging(log_level=settings.log_level, environment=settings.environment, debug=settings.debug)
    await init_db()

    async with async_session_maker() as session:
        await seed(session)
        identity = AnonymousIdentityService(session)
        user_id = await identity.ensure_session()
        print(f"Learner: {user_id}")

        repository = SqlContentRepository(session)
        store = SqlProgressStore(session)
        paths = PathService(repository, store, identity, settings)

        print("\n=== Before ===")
        await print_paths(paths)

        units = await repository.list_units()
        first_unit = units[0]
        first_lesson = (await repository.list_lessons(first_unit.id))[0]
        completion = CompletionSequence(identity, store, settings)

        print(f"\n=== Walking '{first_lesson.title}' ===")
        async with StepRunner(repository, completion, SilentTransport(),
                              unit_id=first_unit.id, unit_title=first_unit.title,
                              settings=settings) as runner:
            await runner.load(first_lesson.id)
            while not runner.is_finished:
                step = runner.current_step
                print(f"  step {runner.current_step_index + 1}/{len(runner.steps)}: {step.type.value}")
                if step.type.value == "quiz":
                    for option in step.payload.options:
                        if runner.select_option(option.id).value == "answered_correct":
                            print(f"  answered '{option.text}': {runner.interaction.explanation}")
                            break
                elif step.type.value == "flashcard":
                    runner.toggle_flashcard()
                    print(f"  card back: {runner.interaction.visible_text}")
                result = await runner.advance()
            print(f"  finished in '{result.unit_title}', saved={result.persisted}")

        print("\n=== After ===")
        await print_paths(paths)

    await close_db()


if __name__ == "__main__":
    asyncio.run(main())
