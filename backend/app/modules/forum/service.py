"""
Forum Service - Question, answer and comment management.
"""

from collections import defaultdict
from typing import Iterable

from loguru import logger
from slugify import slugify
from sqlalchemy import and_, delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.config import settings
from app.core.exceptions import NotFoundError, ValidationError
from app.models.forum import (
    COMMENT_TARGET_MODELS,
    Answer,
    Category,
    Comment,
    CommentTarget,
    CommentTargetType,
    Question,
)
from app.models.user import User


def validate_answer_content(content: str | None) -> str:
    """Return stripped answer content or raise ValidationError."""
    content = (content or "").strip()
    if not content:
        raise ValidationError("content", "The content field is required.")
    if len(content) < settings.forum_answer_min_length:
        raise ValidationError(
            "content",
            f"The content must be at least {settings.forum_answer_min_length} characters.",
        )
    return content


def validate_comment_body(body: str | None) -> str:
    """Return stripped comment body or raise ValidationError.

    The maximum length applies to the body as submitted.
    """
    body = body or ""
    if not body.strip():
        raise ValidationError("body", "The body field is required.")
    if len(body) > settings.forum_comment_max_length:
        raise ValidationError(
            "body",
            f"The body may not be greater than {settings.forum_comment_max_length} characters.",
        )
    return body.strip()


class ForumService:
    """
    Service for managing forum categories, questions, answers and comments.

    Usage:
        forum = ForumService(db_session)
        question = await forum.get_question(question_id)
        answer = await forum.create_answer(question_id, user_id, "Rayleigh scattering.")
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize forum service with database session."""
        self.db = db

    # ==================== Users ====================

    async def get_user(self, user_id: int) -> User:
        """Get user by ID or raise NotFoundError."""
        user = await self.db.get(User, user_id)
        if not user:
            raise NotFoundError("User", user_id)
        return user

    async def create_user(self, name: str, email: str) -> User:
        """Create new forum user."""
        user = User(name=name, email=email)
        self.db.add(user)
        await self.db.flush()
        return user

    async def get_or_create_user(self, name: str, email: str) -> User:
        """Return the user with this email, creating it if missing."""
        result = await self.db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if user:
            return user
        return await self.create_user(name, email)

    # ==================== Categories ====================

    async def get_categories(self) -> list[Category]:
        """Get all categories ordered by name."""
        result = await self.db.execute(select(Category).order_by(Category.name))
        return list(result.scalars().all())

    async def get_category(self, category_id: int) -> Category:
        """Get category by ID or raise NotFoundError."""
        category = await self.db.get(Category, category_id)
        if not category:
            raise NotFoundError("Category", category_id)
        return category

    async def create_category(self, name: str, color: str | None = None) -> Category:
        """Create new category with a unique slug derived from its name."""
        if not name or not name.strip():
            raise ValidationError("name", "The name field is required.")

        base_slug = slugify(name)[:90] or "category"
        slug = base_slug

        # Ensure unique slug
        counter = 1
        while True:
            existing = await self.db.execute(
                select(Category.id).where(Category.slug == slug)
            )
            if existing.scalar_one_or_none() is None:
                break
            slug = f"{base_slug}-{counter}"
            counter += 1

        category = Category(name=name.strip(), slug=slug, color=color)
        self.db.add(category)
        await self.db.flush()
        return category

    # ==================== Questions ====================

    async def get_questions(self, category_slug: str | None = None) -> list[Question]:
        """
        Get all questions, most recent first.

        Args:
            category_slug: Filter by category

        Returns:
            List of questions with user and category loaded
        """
        query = select(Question).options(
            selectinload(Question.user),
            selectinload(Question.category),
        )

        if category_slug:
            query = query.join(Category).where(Category.slug == category_slug)

        query = query.order_by(Question.created_at.desc(), Question.id.desc())

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_question(self, question_id: int) -> Question:
        """
        Get question with user, category and answers (with their users).

        Raises:
            NotFoundError: No question with this ID
        """
        query = (
            select(Question)
            .options(
                selectinload(Question.user),
                selectinload(Question.category),
                selectinload(Question.answers).selectinload(Answer.user),
            )
            .where(Question.id == question_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        question = result.scalar_one_or_none()

        if not question:
            raise NotFoundError("Question", question_id)
        return question

    async def create_question(
        self,
        user_id: int,
        category_id: int,
        title: str,
        description: str,
    ) -> Question:
        """
        Create new question.

        Args:
            user_id: Owner user ID
            category_id: Category ID
            title: Question title
            description: Question body

        Returns:
            Created question
        """
        title = (title or "").strip()
        if not title:
            raise ValidationError("title", "The title field is required.")

        user = await self.get_user(user_id)
        category = await self.get_category(category_id)

        question = Question(
            user_id=user.id,
            category_id=category.id,
            title=title,
            description=(description or "").strip(),
        )
        self.db.add(question)
        await self.db.flush()

        logger.info(f"Question {question.id} created by user {user_id}")
        return question

    async def delete_question(self, question_id: int) -> None:
        """Delete question together with its answers and all their comments."""
        question = await self.get_question(question_id)
        answer_ids = [answer.id for answer in question.answers]

        await self.db.execute(
            delete(Comment).where(
                or_(
                    and_(
                        Comment.commentable_type == CommentTargetType.QUESTION.value,
                        Comment.commentable_id == question.id,
                    ),
                    and_(
                        Comment.commentable_type == CommentTargetType.ANSWER.value,
                        Comment.commentable_id.in_(answer_ids),
                    ),
                )
            )
        )
        await self.db.delete(question)
        await self.db.flush()

        logger.info(f"Question {question_id} deleted with {len(answer_ids)} answers")

    # ==================== Answers ====================

    async def create_answer(
        self,
        question_id: int,
        user_id: int,
        content: str,
    ) -> Answer:
        """
        Create new answer to a question.

        Args:
            question_id: Question ID
            user_id: Acting user ID
            content: Answer text (at least 3 characters)

        Returns:
            Created answer with its user loaded
        """
        question = await self.get_question(question_id)
        content = validate_answer_content(content)
        await self.get_user(user_id)

        answer = Answer(question_id=question.id, user_id=user_id, content=content)
        self.db.add(answer)
        await self.db.flush()
        await self.db.refresh(answer, attribute_names=["user", "created_at"])

        logger.info(f"Answer {answer.id} created on question {question_id}")
        return answer

    # ==================== Comments ====================

    async def resolve_target(self, target: CommentTarget) -> Question | Answer:
        """Resolve comment target to its stored entity or raise NotFoundError."""
        model = COMMENT_TARGET_MODELS[target.type]
        entity = await self.db.get(model, target.id)
        if not entity:
            raise NotFoundError(model.__name__, target.id)
        return entity

    async def get_comments(self, target: CommentTarget) -> list[Comment]:
        """Get comments attached to exactly this target, oldest first."""
        query = (
            select(Comment)
            .options(selectinload(Comment.user))
            .where(
                Comment.commentable_type == target.type.value,
                Comment.commentable_id == target.id,
            )
            .order_by(Comment.created_at, Comment.id)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_comments_for(
        self,
        targets: Iterable[CommentTarget],
    ) -> dict[CommentTarget, list[Comment]]:
        """Get comments for several targets with one query per target type."""
        ids_by_type: dict[CommentTargetType, list[int]] = defaultdict(list)
        for target in targets:
            ids_by_type[target.type].append(target.id)

        comments: dict[CommentTarget, list[Comment]] = {
            CommentTarget(target_type, target_id): []
            for target_type, ids in ids_by_type.items()
            for target_id in ids
        }

        for target_type, ids in ids_by_type.items():
            query = (
                select(Comment)
                .options(selectinload(Comment.user))
                .where(
                    Comment.commentable_type == target_type.value,
                    Comment.commentable_id.in_(ids),
                )
                .order_by(Comment.created_at, Comment.id)
            )
            result = await self.db.execute(query)
            for comment in result.scalars().all():
                comments[comment.target].append(comment)

        return comments

    async def create_comment(
        self,
        target: CommentTarget,
        user_id: int,
        body: str,
    ) -> Comment:
        """
        Create comment on a question or an answer.

        Args:
            target: Question or answer being commented on
            user_id: Acting user ID
            body: Comment text (1 to 1000 characters)

        Returns:
            Created comment with its user loaded
        """
        await self.resolve_target(target)
        body = validate_comment_body(body)
        await self.get_user(user_id)

        comment = Comment(
            commentable_type=target.type.value,
            commentable_id=target.id,
            user_id=user_id,
            body=body,
        )
        self.db.add(comment)
        await self.db.flush()
        await self.db.refresh(comment, attribute_names=["user", "created_at"])

        logger.info(f"Comment {comment.id} created on {target.type.value} {target.id}")
        return comment
