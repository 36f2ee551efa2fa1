"""
Forum models for questions and answers.

Includes:
- Categories
- Questions
- Answers
- Comments (attached to a question or an answer)
"""

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base

if TYPE_CHECKING:
    from app.models.user import User


class CommentTargetType(str, enum.Enum):
    """Discriminator stored in comments.commentable_type."""

    QUESTION = "question"
    ANSWER = "answer"


@dataclass(frozen=True)
class CommentTarget:
    """The entity a comment is attached to."""

    type: CommentTargetType
    id: int

    @classmethod
    def question(cls, question_id: int) -> "CommentTarget":
        return cls(CommentTargetType.QUESTION, question_id)

    @classmethod
    def answer(cls, answer_id: int) -> "CommentTarget":
        return cls(CommentTargetType.ANSWER, answer_id)

    @property
    def key(self) -> str:
        """Stable identifier, e.g. for DOM ids."""
        return f"{self.type.value}-{self.id}"


class Category(Base):
    """Question category."""

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100))
    slug: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    color: Mapped[str | None] = mapped_column(String(20))  # Hex color

    # Relationships
    questions: Mapped[list["Question"]] = relationship(back_populates="category")

    def __repr__(self) -> str:
        return f"<Category {self.name}>"


class Question(Base):
    """Question asked by a user."""

    __tablename__ = "questions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"))
    category_id: Mapped[int] = mapped_column(ForeignKey("categories.id"))

    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[str] = mapped_column(Text)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    user: Mapped["User"] = relationship(back_populates="questions")
    category: Mapped["Category"] = relationship(back_populates="questions")
    answers: Mapped[list["Answer"]] = relationship(
        back_populates="question",
        cascade="all, delete-orphan",
        order_by=lambda: (Answer.created_at, Answer.id),
    )

    @property
    def comment_target(self) -> CommentTarget:
        return CommentTarget.question(self.id)

    def __repr__(self) -> str:
        return f"<Question {self.title[:30]}>"


class Answer(Base):
    """Answer to a question."""

    __tablename__ = "answers"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    question_id: Mapped[int] = mapped_column(ForeignKey("questions.id"), index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"))

    content: Mapped[str] = mapped_column(Text)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    question: Mapped["Question"] = relationship(back_populates="answers")
    user: Mapped["User"] = relationship(back_populates="answers")

    @property
    def comment_target(self) -> CommentTarget:
        return CommentTarget.answer(self.id)

    def __repr__(self) -> str:
        return f"<Answer {self.id} to question {self.question_id}>"


class Comment(Base):
    """Comment on a question or an answer."""

    __tablename__ = "comments"
    __table_args__ = (
        Index("ix_comments_commentable", "commentable_type", "commentable_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"))

    # No FK: the referenced table depends on commentable_type
    commentable_type: Mapped[str] = mapped_column(String(20))
    commentable_id: Mapped[int] = mapped_column()

    body: Mapped[str] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    user: Mapped["User"] = relationship(back_populates="comments")

    @property
    def target(self) -> CommentTarget:
        return CommentTarget(CommentTargetType(self.commentable_type), self.commentable_id)

    def __repr__(self) -> str:
        return f"<Comment {self.id} on {self.commentable_type} {self.commentable_id}>"


# Explicit lookup table for resolving a comment target to its model
COMMENT_TARGET_MODELS: dict[CommentTargetType, type[Question] | type[Answer]] = {
    CommentTargetType.QUESTION: Question,
    CommentTargetType.ANSWER: Answer,
}
