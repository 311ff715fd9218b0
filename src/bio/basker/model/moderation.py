"""Moderation records.

Moderators hold a fixed bundle of four capabilities. Reports follow the
``com.atproto.moderation.createReport`` shape: a reason type, optional
free-text reason and a subject identified by a URI and content hash.
"""

from typing import Dict, Literal, Optional

from bio.basker.model.base import Record

ResolveAction = Literal["approve", "remove", "label", "suspend"]


class ModeratorPermissions(Record):
    can_review_reports: bool = False
    can_issue_labels: bool = False
    can_takedown_content: bool = False
    can_suspend_accounts: bool = False

    @classmethod
    def all(cls) -> "ModeratorPermissions":
        return cls(
            can_review_reports=True,
            can_issue_labels=True,
            can_takedown_content=True,
            can_suspend_accounts=True,
        )

    def has(self, name: str) -> bool:
        """Check a capability by its snake_case or camelCase name."""
        field = PERMISSION_FIELDS.get(name, name)
        return bool(getattr(self, field, False))

    def is_empty(self) -> bool:
        return not any(self.model_dump().values())


PERMISSION_FIELDS: Dict[str, str] = {
    "canReviewReports": "can_review_reports",
    "canIssueLabels": "can_issue_labels",
    "canTakedownContent": "can_takedown_content",
    "canSuspendAccounts": "can_suspend_accounts",
}

# Capability each resolution action needs on top of being a moderator, with
# the wording used when it is missing. Approving needs nothing extra.
ACTION_PERMISSIONS: Dict[str, tuple[str, str]] = {
    "remove": ("can_takedown_content", "remove content"),
    "suspend": ("can_suspend_accounts", "suspend accounts"),
    "label": ("can_issue_labels", "issue labels"),
}


class Moderator(Record):
    did: str
    handle: str
    permissions: ModeratorPermissions
    added_by: str
    added_at: str


class AddModerator(Record):
    """Body of ``POST /api/moderation/moderators``."""

    did: Optional[str] = None
    handle: Optional[str] = None
    permissions: Optional[ModeratorPermissions] = None


class ReportSubject(Record):
    uri: str
    cid: str


class CreateReport(Record):
    reason_type: str
    reason: Optional[str] = None
    subject: ReportSubject


class ReportQuery(Record):
    subject: Optional[str] = None
    resolved: bool = False
    limit: Optional[int] = None


class ResolveReport(Record):
    """Body of ``POST /api/moderation/reports/{id}/resolve``."""

    action: Optional[ResolveAction] = None
    note: Optional[str] = None


class Resolution(Record):
    success: bool = True
    report_id: str
    action: ResolveAction
    resolved_by: str
    resolved_at: str
