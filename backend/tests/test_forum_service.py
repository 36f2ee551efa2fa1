"""
Tests for ForumService
"""
import pytest
from sqlalchemy import func, select

from app.core.exceptions import NotFoundError, ValidationError
from app.models.forum import Answer, Comment, CommentTarget


async def _count(db, model) -> int:
    result = await db.execute(select(func.count(model.id)))
    return result.scalar_one()


@pytest.mark.asyncio
async def test_question_detail_returns_answers_in_creation_order(forum, seeded):
    """Answers come back oldest first, each with its own author"""
    await forum.create_answer(seeded.question_id, seeded.bob_id, "Rayleigh scattering.")
    await forum.create_answer(seeded.question_id, seeded.alice_id, "Shorter wavelengths scatter more.")
    await forum.create_answer(seeded.question_id, seeded.bob_id, "See also Mie scattering.")

    question = await forum.get_question(seeded.question_id)

    assert [a.content for a in question.answers] == [
        "Rayleigh scattering.",
        "Shorter wavelengths scatter more.",
        "See also Mie scattering.",
    ]
    assert [a.user.name for a in question.answers] == ["Bob", "Alice", "Bob"]
    assert question.user.name == "Alice"
    assert question.category.name == "Physics"


@pytest.mark.asyncio
async def test_get_question_unknown_id(forum):
    with pytest.raises(NotFoundError) as exc_info:
        await forum.get_question(999)
    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize("content", ["", "  ", "ab", " ab "])
async def test_short_answer_rejected_without_record(forum, db, seeded, content):
    with pytest.raises(ValidationError) as exc_info:
        await forum.create_answer(seeded.question_id, seeded.bob_id, content)

    assert exc_info.value.field == "content"
    assert await _count(db, Answer) == 0


@pytest.mark.asyncio
async def test_three_character_answer_accepted(forum, seeded):
    answer = await forum.create_answer(seeded.question_id, seeded.bob_id, "Yes")
    assert answer.content == "Yes"
    assert answer.user.name == "Bob"


@pytest.mark.asyncio
async def test_answer_to_missing_question(forum, seeded):
    with pytest.raises(NotFoundError):
        await forum.create_answer(404, seeded.bob_id, "Rayleigh scattering.")


@pytest.mark.asyncio
async def test_answer_by_unknown_user(forum, db, seeded):
    with pytest.raises(NotFoundError):
        await forum.create_answer(seeded.question_id, 999, "Rayleigh scattering.")
    assert await _count(db, Answer) == 0


@pytest.mark.asyncio
async def test_empty_comment_rejected(forum, db, seeded):
    target = CommentTarget.question(seeded.question_id)

    with pytest.raises(ValidationError) as exc_info:
        await forum.create_comment(target, seeded.bob_id, "")

    assert exc_info.value.field == "body"
    assert await _count(db, Comment) == 0


@pytest.mark.asyncio
async def test_comment_length_bounds(forum, db, seeded):
    target = CommentTarget.question(seeded.question_id)

    shortest = await forum.create_comment(target, seeded.bob_id, "k")
    longest = await forum.create_comment(target, seeded.bob_id, "x" * 1000)
    with pytest.raises(ValidationError):
        await forum.create_comment(target, seeded.bob_id, "x" * 1001)

    assert shortest.target == target
    assert longest.target == target
    assert await _count(db, Comment) == 2


@pytest.mark.asyncio
async def test_comment_maximum_counts_surrounding_whitespace(forum, db, seeded):
    target = CommentTarget.question(seeded.question_id)

    with pytest.raises(ValidationError) as exc_info:
        await forum.create_comment(target, seeded.bob_id, "x" * 1000 + " ")
    assert exc_info.value.field == "body"

    comment = await forum.create_comment(target, seeded.bob_id, " " + "x" * 999)
    assert comment.body == "x" * 999
    assert await _count(db, Comment) == 1


@pytest.mark.asyncio
async def test_comment_on_missing_target(forum, seeded):
    with pytest.raises(NotFoundError) as exc_info:
        await forum.create_comment(CommentTarget.answer(77), seeded.bob_id, "Hello")
    assert exc_info.value.entity == "Answer"


@pytest.mark.asyncio
async def test_comments_are_isolated_per_target(forum, seeded):
    """A comment on an answer never shows up under its question, and vice versa"""
    answer = await forum.create_answer(seeded.question_id, seeded.bob_id, "Rayleigh scattering.")

    question_target = CommentTarget.question(seeded.question_id)
    answer_target = answer.comment_target

    await forum.create_comment(question_target, seeded.bob_id, "Good question")
    await forum.create_comment(answer_target, seeded.alice_id, "Thanks!")

    question_comments = await forum.get_comments(question_target)
    answer_comments = await forum.get_comments(answer_target)

    assert [c.body for c in question_comments] == ["Good question"]
    assert [c.body for c in answer_comments] == ["Thanks!"]
    assert answer_comments[0].user.name == "Alice"


@pytest.mark.asyncio
async def test_same_id_different_target_types(forum, seeded):
    """Question 1 and answer 1 share an id but not their comments"""
    answer = await forum.create_answer(seeded.question_id, seeded.bob_id, "Rayleigh scattering.")
    assert answer.id == seeded.question_id

    await forum.create_comment(answer.comment_target, seeded.bob_id, "On the answer")

    assert await forum.get_comments(CommentTarget.question(seeded.question_id)) == []
    assert len(await forum.get_comments(answer.comment_target)) == 1


@pytest.mark.asyncio
async def test_get_comments_for_groups_by_target(forum, seeded):
    first = await forum.create_answer(seeded.question_id, seeded.bob_id, "First answer")
    second = await forum.create_answer(seeded.question_id, seeded.bob_id, "Second answer")
    question_target = CommentTarget.question(seeded.question_id)

    await forum.create_comment(first.comment_target, seeded.alice_id, "one")
    await forum.create_comment(first.comment_target, seeded.alice_id, "two")
    await forum.create_comment(question_target, seeded.alice_id, "three")

    grouped = await forum.get_comments_for(
        [question_target, first.comment_target, second.comment_target]
    )

    assert [c.body for c in grouped[first.comment_target]] == ["one", "two"]
    assert [c.body for c in grouped[question_target]] == ["three"]
    assert grouped[second.comment_target] == []


@pytest.mark.asyncio
async def test_questions_listed_most_recent_first(forum, seeded):
    newer = await forum.create_question(
        user_id=seeded.bob_id,
        category_id=seeded.category_id,
        title="What is dark matter?",
        description="",
    )

    questions = await forum.get_questions()

    assert [q.id for q in questions] == [newer.id, seeded.question_id]
    assert questions[0].user.name == "Bob"


@pytest.mark.asyncio
async def test_questions_filtered_by_category(forum, seeded):
    cooking = await forum.create_category("Cooking")
    await forum.create_question(
        user_id=seeded.bob_id,
        category_id=cooking.id,
        title="How long to boil an egg?",
        description="",
    )

    questions = await forum.get_questions(category_slug="cooking")

    assert [q.title for q in questions] == ["How long to boil an egg?"]


@pytest.mark.asyncio
async def test_question_requires_existing_category(forum, seeded):
    with pytest.raises(NotFoundError):
        await forum.create_question(
            user_id=seeded.alice_id, category_id=42, title="Orphan?", description=""
        )


@pytest.mark.asyncio
async def test_category_slugs_are_unique(forum):
    first = await forum.create_category("Web Development")
    second = await forum.create_category("Web development")

    assert first.slug == "web-development"
    assert second.slug == "web-development-1"


@pytest.mark.asyncio
async def test_delete_question_cascades(forum, db, seeded):
    answer = await forum.create_answer(seeded.question_id, seeded.bob_id, "Rayleigh scattering.")
    await forum.create_comment(answer.comment_target, seeded.alice_id, "Thanks!")
    await forum.create_comment(
        CommentTarget.question(seeded.question_id), seeded.bob_id, "Good question"
    )

    other = await forum.create_question(
        user_id=seeded.bob_id,
        category_id=seeded.category_id,
        title="Why is grass green?",
        description="",
    )
    await forum.create_comment(other.comment_target, seeded.alice_id, "Chlorophyll")

    await forum.delete_question(seeded.question_id)

    assert await _count(db, Answer) == 0
    remaining = await forum.get_comments(other.comment_target)
    assert [c.body for c in remaining] == ["Chlorophyll"]
    assert await _count(db, Comment) == 1
    with pytest.raises(NotFoundError):
        await forum.get_question(seeded.question_id)
