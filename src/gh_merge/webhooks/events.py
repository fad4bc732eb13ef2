"""
Webhook event definitions and types.

Provides the raw webhook event and the generic comment event that
plugins receive, built from issue comments, pull request review
comments and pull request reviews alike.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Dict, Any, Optional
from datetime import datetime, timezone


class EventType(Enum):
    """GitHub webhook event types."""

    PULL_REQUEST = "pull_request"
    PULL_REQUEST_REVIEW = "pull_request_review"
    PULL_REQUEST_REVIEW_COMMENT = "pull_request_review_comment"
    ISSUE_COMMENT = "issue_comment"
    PING = "ping"
    OTHER = "other"  # For unknown/unhandled event types


COMMENT_EVENT_TYPES = frozenset({
    EventType.ISSUE_COMMENT,
    EventType.PULL_REQUEST_REVIEW_COMMENT,
    EventType.PULL_REQUEST_REVIEW,
})


class GenericCommentAction(Enum):
    """What happened to a comment."""

    CREATED = "created"
    EDITED = "edited"
    DELETED = "deleted"


# Review actions map onto comment actions; other actions are not comments
_REVIEW_ACTIONS = {
    'submitted': GenericCommentAction.CREATED,
    'edited': GenericCommentAction.EDITED,
    'dismissed': GenericCommentAction.DELETED,
}


@dataclass
class WebhookEvent:
    """
    Represents a GitHub webhook event.

    Attributes:
        type: Event type
        delivery_id: Unique delivery ID from GitHub
        payload: Event payload data
        headers: HTTP headers from webhook request
        received_at: Timestamp when event was received
    """

    type: EventType
    delivery_id: str
    payload: Dict[str, Any]
    headers: Dict[str, str] = field(default_factory=dict)
    received_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def action(self) -> Optional[str]:
        """Get event action if available."""
        return self.payload.get('action')

    def is_comment_event(self) -> bool:
        """Check if this event can carry a comment command."""
        return self.type in COMMENT_EVENT_TYPES


@dataclass(frozen=True)
class Repo:
    """Repository identity."""

    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True)
class GenericCommentEvent:
    """
    A comment on an issue or pull request, whatever webhook carried it.

    Attributes:
        action: What happened to the comment
        is_pr: Whether the comment is on a pull request
        body: Comment body
        html_url: Link to the comment
        user: Login of the commenter
        issue_author: Login of the issue or pull request author
        repo: Repository the issue lives in
        number: Issue or pull request number
        issue_state: State of the issue, e.g. "open" or "closed"
        guid: Webhook delivery ID
    """

    action: GenericCommentAction
    is_pr: bool
    body: str
    html_url: str
    user: str
    issue_author: str
    repo: Repo
    number: int
    issue_state: str
    guid: str = ""

    @classmethod
    def from_webhook(cls, event: WebhookEvent) -> Optional["GenericCommentEvent"]:
        """
        Build a generic comment event from a webhook event.

        Args:
            event: Raw webhook event

        Returns:
            GenericCommentEvent, or None if the event carries no comment
        """
        payload = event.payload
        repository = payload.get('repository') or {}
        repo = Repo(
            owner=(repository.get('owner') or {}).get('login', ''),
            name=repository.get('name', ''),
        )

        if event.type == EventType.ISSUE_COMMENT:
            try:
                action = GenericCommentAction(payload.get('action'))
            except ValueError:
                return None
            issue = payload.get('issue') or {}
            comment = payload.get('comment') or {}
            return cls(
                action=action,
                is_pr='pull_request' in issue,
                body=comment.get('body') or '',
                html_url=comment.get('html_url', ''),
                user=(comment.get('user') or {}).get('login', ''),
                issue_author=(issue.get('user') or {}).get('login', ''),
                repo=repo,
                number=issue.get('number', 0),
                issue_state=issue.get('state', ''),
                guid=event.delivery_id,
            )

        if event.type == EventType.PULL_REQUEST_REVIEW_COMMENT:
            try:
                action = GenericCommentAction(payload.get('action'))
            except ValueError:
                return None
            pr = payload.get('pull_request') or {}
            comment = payload.get('comment') or {}
            return cls(
                action=action,
                is_pr=True,
                body=comment.get('body') or '',
                html_url=comment.get('html_url', ''),
                user=(comment.get('user') or {}).get('login', ''),
                issue_author=(pr.get('user') or {}).get('login', ''),
                repo=repo,
                number=pr.get('number', 0),
                issue_state=pr.get('state', ''),
                guid=event.delivery_id,
            )

        if event.type == EventType.PULL_REQUEST_REVIEW:
            action = _REVIEW_ACTIONS.get(payload.get('action'))
            if action is None:
                return None
            pr = payload.get('pull_request') or {}
            review = payload.get('review') or {}
            return cls(
                action=action,
                is_pr=True,
                body=review.get('body') or '',
                html_url=review.get('html_url', ''),
                user=(review.get('user') or {}).get('login', ''),
                issue_author=(pr.get('user') or {}).get('login', ''),
                repo=repo,
                number=pr.get('number', 0),
                issue_state=pr.get('state', ''),
                guid=event.delivery_id,
            )

        return None
