"""
Comment Widget - Per-target comment list with a toggleable form.

The client holds the widget state and posts it back with every event;
the server applies the event and re-renders the fragment.
"""

from dataclasses import dataclass, field

from loguru import logger

from app.core.exceptions import ValidationError
from app.models.forum import Comment, CommentTarget
from app.modules.forum.service import ForumService


@dataclass
class CommentWidget:
    """
    Comment component bound to one question or answer.

    Usage:
        widget = CommentWidget(CommentTarget.answer(answer_id))
        widget.on_toggle()
        widget.on_draft_change("Nice answer")
        await widget.on_submit(forum, acting_user_id)
    """

    target: CommentTarget
    form_visible: bool = False
    draft_body: str = ""
    errors: dict[str, str] = field(default_factory=dict)
    comments: list[Comment] = field(default_factory=list)

    async def load(self, forum: ForumService) -> None:
        """Refresh the comment list from the store."""
        self.comments = await forum.get_comments(self.target)

    def on_toggle(self) -> None:
        """Show or hide the comment form."""
        self.form_visible = not self.form_visible

    def on_draft_change(self, body: str) -> None:
        """Replace the draft with what the user typed."""
        self.draft_body = body

    async def on_submit(
        self,
        forum: ForumService,
        acting_user_id: int,
    ) -> Comment | None:
        """
        Create a comment from the draft.

        Returns:
            Created comment, or None if the draft failed validation
            (state is left unchanged and the error is kept in errors)
        """
        try:
            comment = await forum.create_comment(
                self.target, acting_user_id, self.draft_body
            )
        except ValidationError as e:
            logger.debug(f"Comment on {self.target.key} rejected: {e.message}")
            self.errors = {e.field: e.message}
            return None

        self.draft_body = ""
        self.form_visible = False
        self.errors = {}
        await self.load(forum)
        return comment
