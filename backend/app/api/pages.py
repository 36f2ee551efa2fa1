"""
HTML pages: question listing, question detail and answer form.
"""

from fastapi import APIRouter, Depends, Form, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_acting_user_id
from app.core.database import get_db
from app.core.exceptions import ValidationError
from app.core.templates import render_template
from app.models.forum import Question
from app.modules.forum import CommentWidget, ForumService

router = APIRouter(default_response_class=HTMLResponse)


async def _question_page(
    request: Request,
    forum: ForumService,
    question: Question,
    errors: dict[str, str] | None = None,
    draft: str = "",
    status_code: int = 200,
):
    """Render the detail page with one comment widget per question/answer."""
    targets = [question.comment_target] + [a.comment_target for a in question.answers]
    comments = await forum.get_comments_for(targets)

    widgets = {
        target: CommentWidget(target, comments=comments[target]) for target in targets
    }

    return render_template(
        request,
        "questions/show.html",
        {
            "question": question,
            "widgets": widgets,
            "errors": errors or {},
            "draft": draft,
        },
        status_code=status_code,
    )


@router.get("/", name="home")
async def home(
    request: Request,
    category: str | None = Query(None, description="Category slug"),
    db: AsyncSession = Depends(get_db),
):
    """List all questions, most recent first."""
    forum = ForumService(db)
    questions = await forum.get_questions(category_slug=category)
    categories = await forum.get_categories()

    return render_template(
        request,
        "pages/home.html",
        {
            "questions": questions,
            "categories": categories,
            "active_category": category,
        },
    )


@router.get("/questions/{question_id}", name="questions.show")
async def show_question(
    request: Request,
    question_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Question with its answers and comment widgets."""
    forum = ForumService(db)
    question = await forum.get_question(question_id)
    return await _question_page(request, forum, question)


@router.post("/questions/{question_id}/answers", name="answers.store")
async def store_answer(
    request: Request,
    question_id: int,
    content: str = Form(""),
    user_id: int = Depends(get_acting_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Create answer from the form and go back to the question."""
    forum = ForumService(db)

    try:
        await forum.create_answer(question_id, user_id, content)
    except ValidationError as e:
        question = await forum.get_question(question_id)
        return await _question_page(
            request,
            forum,
            question,
            errors={e.field: e.message},
            draft=content,
            status_code=422,
        )

    return RedirectResponse(
        request.url_for("questions.show", question_id=question_id),
        status_code=303,
    )


@router.post("/questions/{question_id}/delete", name="questions.destroy")
async def destroy_question(
    request: Request,
    question_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Delete question and return to the listing."""
    forum = ForumService(db)
    await forum.delete_question(question_id)
    return RedirectResponse(request.url_for("home"), status_code=303)
