"""
Comment widget endpoints.

Each event receives the widget state posted by the client and
returns the re-rendered fragment for that one widget. Every response,
including errors, is a fragment marked with the X-Widget-Fragment header.
"""

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_acting_user_id
from app.core.database import get_db
from app.core.exceptions import NotFoundError
from app.core.templates import render_template
from app.models.forum import CommentTarget, CommentTargetType
from app.modules.forum import CommentWidget, ForumService

router = APIRouter(default_response_class=HTMLResponse)

FRAGMENT_HEADER = "X-Widget-Fragment"


async def _widget(
    target: CommentTarget,
    forum: ForumService,
    form_visible: bool = False,
    draft_body: str = "",
) -> CommentWidget:
    await forum.resolve_target(target)

    widget = CommentWidget(target, form_visible=form_visible, draft_body=draft_body)
    await widget.load(forum)
    return widget


def _render(request: Request, widget: CommentWidget, status_code: int = 200):
    response = render_template(
        request, "widgets/comment.html", {"widget": widget}, status_code=status_code
    )
    response.headers[FRAGMENT_HEADER] = "1"
    return response


def _render_not_found(
    request: Request,
    target: CommentTarget,
    error: NotFoundError,
    form_visible: bool = False,
    draft_body: str = "",
):
    """Fragment for a target or user that no longer exists; the draft is kept."""
    logger.debug(f"Comment widget {target.key}: {error.message}")
    widget = CommentWidget(
        target,
        form_visible=form_visible,
        draft_body=draft_body,
        errors={"form": error.message},
    )
    return _render(request, widget, status_code=error.status_code)


@router.get("/{target_type}/{target_id}", name="widgets.comments.show")
async def show_widget(
    request: Request,
    target_type: CommentTargetType,
    target_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Initial widget fragment."""
    target = CommentTarget(target_type, target_id)
    try:
        widget = await _widget(target, ForumService(db))
    except NotFoundError as e:
        return _render_not_found(request, target, e)
    return _render(request, widget)


@router.post("/{target_type}/{target_id}/toggle", name="widgets.comments.toggle")
async def toggle_widget(
    request: Request,
    target_type: CommentTargetType,
    target_id: int,
    form_visible: bool = Form(False),
    draft_body: str = Form(""),
    db: AsyncSession = Depends(get_db),
):
    """Show or hide the comment form."""
    target = CommentTarget(target_type, target_id)
    try:
        widget = await _widget(target, ForumService(db), form_visible, draft_body)
    except NotFoundError as e:
        return _render_not_found(request, target, e, form_visible, draft_body)

    widget.on_toggle()
    return _render(request, widget)


@router.post("/{target_type}/{target_id}/submit", name="widgets.comments.submit")
async def submit_widget(
    request: Request,
    target_type: CommentTargetType,
    target_id: int,
    form_visible: bool = Form(True),
    draft_body: str = Form(""),
    user_id: int = Depends(get_acting_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Create comment from the draft and re-render the list."""
    forum = ForumService(db)
    target = CommentTarget(target_type, target_id)

    try:
        widget = await _widget(target, forum, form_visible)
        widget.on_draft_change(draft_body)
        comment = await widget.on_submit(forum, user_id)
    except NotFoundError as e:
        return _render_not_found(request, target, e, form_visible, draft_body)

    return _render(request, widget, status_code=201 if comment else 422)
