"""
Forum Module - Questions, answers and comments.

Features:
- Categories and questions
- Answers with minimum length validation
- Comments on questions and answers
- Reactive comment widget
"""

from app.modules.forum.service import ForumService
from app.modules.forum.widget import CommentWidget

__all__ = ["ForumService", "CommentWidget"]
