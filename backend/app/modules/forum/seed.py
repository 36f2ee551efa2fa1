"""
Demo data for the forum.

Run with:
    qa-forum-seed --users 20 --questions 30
"""

import argparse
import asyncio
import random

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import async_session, close_db, init_db
from app.models.forum import CommentTarget
from app.models.user import User
from app.modules.forum.service import ForumService

FIRST_NAMES = [
    "Ana", "Bruno", "Carla", "Diego", "Elena", "Felix", "Gabriela", "Hugo",
    "Irene", "Jorge", "Karen", "Luis", "Marta", "Nico", "Olga", "Pablo",
]
LAST_NAMES = [
    "Garcia", "Lopez", "Martinez", "Perez", "Sanchez", "Romero", "Torres",
    "Navarro", "Ruiz", "Vargas",
]
WORDS = [
    "python", "async", "database", "query", "index", "cache", "thread",
    "deploy", "docker", "testing", "routing", "template", "session", "schema",
    "migration", "logging", "config", "error", "request", "response",
]


def _sentence(rng: random.Random, min_words: int, max_words: int) -> str:
    words = rng.choices(WORDS, k=rng.randint(min_words, max_words))
    return " ".join(words).capitalize()


def _hex_color(rng: random.Random) -> str:
    return f"#{rng.randrange(0x1000000):06x}"


async def seed_forum(
    db: AsyncSession,
    users: int = 20,
    categories: int = 4,
    questions: int = 30,
    answers: int = 100,
    comments_per_kind: int = 200,
    seed: int | None = None,
) -> dict[str, int]:
    """
    Populate the forum with random users, questions, answers and comments.

    Questions get a random owner and category, answers a random question
    and author, and comments are split between answers and questions.

    Returns:
        Number of seeded rows per entity (existing users are reused)
    """
    rng = random.Random(seed)
    forum = ForumService(db)

    created_users = []
    for i in range(users):
        name = f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}"
        email = f"{name.lower().replace(' ', '.')}.{i}@example.com"
        created_users.append(await forum.get_or_create_user(name, email))

    # Known account for manual testing
    await forum.get_or_create_user("Test User", "test@example.com")

    created_categories = []
    for word in rng.sample(WORDS, k=min(categories, len(WORDS))):
        created_categories.append(
            await forum.create_category(word.capitalize(), color=_hex_color(rng))
        )

    created_questions = []
    for _ in range(questions):
        created_questions.append(
            await forum.create_question(
                user_id=rng.choice(created_users).id,
                category_id=rng.choice(created_categories).id,
                title=_sentence(rng, 4, 9) + "?",
                description=_sentence(rng, 20, 40) + ".",
            )
        )

    created_answers = []
    if created_questions:
        for _ in range(answers):
            created_answers.append(
                await forum.create_answer(
                    question_id=rng.choice(created_questions).id,
                    user_id=rng.choice(created_users).id,
                    content=_sentence(rng, 8, 25) + ".",
                )
            )

    comment_count = 0
    for targets in (
        [a.comment_target for a in created_answers],
        [q.comment_target for q in created_questions],
    ):
        if not targets:
            continue
        for _ in range(comments_per_kind):
            target: CommentTarget = rng.choice(targets)
            await forum.create_comment(
                target,
                user_id=rng.choice(created_users).id,
                body=_sentence(rng, 3, 15) + ".",
            )
            comment_count += 1

    counts = {
        "users": len(created_users) + 1,
        "categories": len(created_categories),
        "questions": len(created_questions),
        "answers": len(created_answers),
        "comments": comment_count,
    }
    logger.info(f"Seeded forum: {counts}")
    return counts


async def seed_if_empty(db: AsyncSession) -> bool:
    """Seed default demo data into a database that has no users yet."""
    result = await db.execute(select(func.count(User.id)))
    if result.scalar_one() > 0:
        return False
    await seed_forum(db)
    return True


async def _run(args: argparse.Namespace) -> None:
    await init_db()
    try:
        async with async_session() as db:
            await seed_forum(
                db,
                users=args.users,
                categories=args.categories,
                questions=args.questions,
                answers=args.answers,
                comments_per_kind=args.comments,
                seed=args.seed,
            )
            await db.commit()
    finally:
        await close_db()


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the Q&A forum with demo data")
    parser.add_argument("--users", type=int, default=20)
    parser.add_argument("--categories", type=int, default=4)
    parser.add_argument("--questions", type=int, default=30)
    parser.add_argument("--answers", type=int, default=100)
    parser.add_argument("--comments", type=int, default=200, help="Comments per target kind")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    asyncio.run(_run(parser.parse_args()))


if __name__ == "__main__":
    main()
