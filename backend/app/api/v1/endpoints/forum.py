"""
Forum API Endpoints.

Questions, answers and comments as JSON.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_acting_user_id
from app.core.database import get_db
from app.models.forum import Answer, Comment, CommentTarget, CommentTargetType
from app.models.user import User
from app.modules.forum.service import ForumService

router = APIRouter()


# ==================== Schemas ====================


class CreateCategoryRequest(BaseModel):
    """Create new category."""

    name: str
    color: str | None = None


class CreateQuestionRequest(BaseModel):
    """Create new question."""

    category_id: int
    title: str
    description: str = ""


class CreateAnswerRequest(BaseModel):
    """Create new answer."""

    content: str


class CreateCommentRequest(BaseModel):
    """Create new comment on a question or answer."""

    target_type: CommentTargetType
    target_id: int
    body: str


# ==================== Serializers ====================


def _user(user: User | None) -> dict[str, Any] | None:
    if not user:
        return None
    return {"id": user.id, "name": user.name}


def _answer(answer: Answer) -> dict[str, Any]:
    return {
        "id": answer.id,
        "question_id": answer.question_id,
        "content": answer.content,
        "user": _user(answer.user),
        "created_at": answer.created_at.isoformat(),
    }


def _comment(comment: Comment) -> dict[str, Any]:
    return {
        "id": comment.id,
        "target_type": comment.commentable_type,
        "target_id": comment.commentable_id,
        "body": comment.body,
        "user": _user(comment.user),
        "created_at": comment.created_at.isoformat(),
    }


# ==================== Categories ====================


@router.get("/categories")
async def get_categories(
    db: AsyncSession = Depends(get_db),
) -> list[dict[str, Any]]:
    """Get all categories."""
    forum = ForumService(db)
    categories = await forum.get_categories()

    return [
        {"id": cat.id, "name": cat.name, "slug": cat.slug, "color": cat.color}
        for cat in categories
    ]


@router.post("/categories", status_code=201)
async def create_category(
    request: CreateCategoryRequest,
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Create new category."""
    forum = ForumService(db)
    category = await forum.create_category(request.name, color=request.color)

    return {
        "id": category.id,
        "name": category.name,
        "slug": category.slug,
        "color": category.color,
    }


# ==================== Questions ====================


@router.get("/questions")
async def get_questions(
    category: str | None = Query(None, description="Category slug"),
    db: AsyncSession = Depends(get_db),
) -> list[dict[str, Any]]:
    """Get all questions, most recent first."""
    forum = ForumService(db)
    questions = await forum.get_questions(category_slug=category)

    return [
        {
            "id": q.id,
            "title": q.title,
            "user": _user(q.user),
            "category": q.category.name if q.category else None,
            "created_at": q.created_at.isoformat(),
        }
        for q in questions
    ]


@router.get("/questions/{question_id}")
async def get_question(
    question_id: int,
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Get question with answers and comments."""
    forum = ForumService(db)
    question = await forum.get_question(question_id)

    targets = [question.comment_target] + [a.comment_target for a in question.answers]
    comments = await forum.get_comments_for(targets)

    return {
        "id": question.id,
        "title": question.title,
        "description": question.description,
        "user": _user(question.user),
        "category": {
            "id": question.category.id,
            "name": question.category.name,
            "slug": question.category.slug,
            "color": question.category.color,
        } if question.category else None,
        "created_at": question.created_at.isoformat(),
        "comments": [_comment(c) for c in comments[question.comment_target]],
        "answers": [
            {
                **_answer(a),
                "comments": [_comment(c) for c in comments[a.comment_target]],
            }
            for a in question.answers
        ],
    }


@router.post("/questions", status_code=201)
async def create_question(
    request: CreateQuestionRequest,
    user_id: int = Depends(get_acting_user_id),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Create new question."""
    forum = ForumService(db)

    question = await forum.create_question(
        user_id=user_id,
        category_id=request.category_id,
        title=request.title,
        description=request.description,
    )

    return {
        "id": question.id,
        "title": question.title,
        "created_at": question.created_at.isoformat(),
    }


@router.delete("/questions/{question_id}", status_code=204)
async def delete_question(
    question_id: int,
    db: AsyncSession = Depends(get_db),
) -> Response:
    """Delete question with its answers and comments."""
    forum = ForumService(db)
    await forum.delete_question(question_id)
    return Response(status_code=204)


# ==================== Answers ====================


@router.post("/questions/{question_id}/answers", status_code=201)
async def create_answer(
    question_id: int,
    request: CreateAnswerRequest,
    user_id: int = Depends(get_acting_user_id),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Create new answer to question."""
    forum = ForumService(db)
    answer = await forum.create_answer(question_id, user_id, request.content)
    return _answer(answer)


# ==================== Comments ====================


@router.get("/comments")
async def get_comments(
    target_type: CommentTargetType = Query(...),
    target_id: int = Query(...),
    db: AsyncSession = Depends(get_db),
) -> list[dict[str, Any]]:
    """Get comments on a question or answer."""
    forum = ForumService(db)
    target = CommentTarget(target_type, target_id)

    await forum.resolve_target(target)
    comments = await forum.get_comments(target)

    return [_comment(c) for c in comments]


@router.post("/comments", status_code=201)
async def create_comment(
    request: CreateCommentRequest,
    user_id: int = Depends(get_acting_user_id),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Create new comment on a question or answer."""
    forum = ForumService(db)
    comment = await forum.create_comment(
        CommentTarget(request.target_type, request.target_id),
        user_id,
        request.body,
    )
    return _comment(comment)
