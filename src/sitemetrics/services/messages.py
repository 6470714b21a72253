"""Interface messages and number formatting for the metrics page."""

import math
from collections.abc import Callable
from decimal import Decimal
from typing import Any

from sitemetrics.core.config import settings

NumberFormatter = Callable[[Any], str]

MESSAGES: dict[str, str] = {
    "sitemetrics": "Site metrics",
    "sitemetrics-title": "Site metrics - {0}",
    "sitemetrics-date": "Date",
    "sitemetrics-count": "Count",
    "sitemetrics-difference": "Difference",
    # Navigation section headers
    "sitemetrics-content-header": "Content statistics",
    "sitemetrics-user-social-header": "User and social statistics",
    "sitemetrics-point-stats-header": "Point statistics",
    "sitemetrics-casual-game-stats": "Casual game statistics",
    "sitemetrics-blog-stats-header": "Blog and voting statistics",
    "sitemetrics-viral-stats": "Viral statistics",
    # Content
    "sitemetrics-edits": "Edits",
    "sitemetrics-total-edits-month": "Total edits by month",
    "sitemetrics-total-edits-day": "Total edits by day",
    "sitemetrics-main-ns": "Main namespace edits",
    "sitemetrics-main-ns-edits-month": "Main namespace edits by month",
    "sitemetrics-main-ns-edits-day": "Main namespace edits by day",
    "sitemetrics-new-articles": "New main namespace articles",
    "sitemetrics-new-articles-month": "New main namespace articles by month",
    "sitemetrics-new-articles-day": "New main namespace articles by day",
    "sitemetrics-anon-edits": "Anonymous edits",
    "sitemetrics-anon-edits-month": "Anonymous edits by month",
    "sitemetrics-anon-edits-day": "Anonymous edits by day",
    "sitemetrics-images": "Images",
    "sitemetrics-images-month": "Images uploaded by month",
    "sitemetrics-images-day": "Images uploaded by day",
    "sitemetrics-video": "Video",
    "sitemetrics-video-month": "Videos added by month",
    "sitemetrics-video-day": "Videos added by day",
    # User and social
    "sitemetrics-new-users": "New users",
    "sitemetrics-new-users-month": "New users by month",
    "sitemetrics-new-users-day": "New users by day",
    "sitemetrics-avatars": "Avatar uploads",
    "sitemetrics-avatars-month": "Avatar uploads by month",
    "sitemetrics-avatars-day": "Avatar uploads by day",
    "sitemetrics-profile-updates": "Profile updates",
    "sitemetrics-profile-updates-month": "Profile updates by month",
    "sitemetrics-profile-updates-day": "Profile updates by day",
    "sitemetrics-user-page-edits": "User page edits",
    "sitemetrics-user-page-edits-month": "User page edits by month",
    "sitemetrics-user-page-edits-day": "User page edits by day",
    "sitemetrics-friendships": "Friendships",
    "sitemetrics-friendships-month": "Friendships by month",
    "sitemetrics-friendships-day": "Friendships by day",
    "sitemetrics-foeships": "Foeships",
    "sitemetrics-foeships-month": "Foeships by month",
    "sitemetrics-foeships-day": "Foeships by day",
    "sitemetrics-gifts": "Gifts",
    "sitemetrics-gifts-month": "Gifts given by month",
    "sitemetrics-gifts-day": "Gifts given by day",
    "sitemetrics-wall-messages": "Wall messages",
    "sitemetrics-wall-messages-month": "Wall messages by month",
    "sitemetrics-wall-messages-day": "Wall messages by day",
    "sitemetrics-talk-messages": "User talk messages",
    "sitemetrics-talk-messages-month": "User talk messages by month",
    "sitemetrics-talk-messages-day": "User talk messages by day",
    # Points
    "sitemetrics-awards": "Awards",
    "sitemetrics-awards-month": "Awards given by month",
    "sitemetrics-awards-day": "Awards given by day",
    "sitemetrics-honorifics": "Honorific advancements",
    "sitemetrics-honorifics-month": "Honorific advancements by month",
    "sitemetrics-honorifics-day": "Honorific advancements by day",
    # Casual games
    "sitemetrics-polls-created": "Polls created",
    "sitemetrics-polls-created-month": "Polls created by month",
    "sitemetrics-polls-created-day": "Polls created by day",
    "sitemetrics-polls-taken": "Polls taken",
    "sitemetrics-polls-taken-month": "Polls taken by month",
    "sitemetrics-polls-taken-day": "Polls taken by day",
    "sitemetrics-picgames-created": "Picture games created",
    "sitemetrics-picgames-created-month": "Picture games created by month",
    "sitemetrics-picgames-created-day": "Picture games created by day",
    "sitemetrics-picgames-taken": "Picture games taken",
    "sitemetrics-picgames-taken-month": "Picture games taken by month",
    "sitemetrics-picgames-taken-day": "Picture games taken by day",
    "sitemetrics-quizzes-created": "Quizzes created",
    "sitemetrics-quizzes-created-month": "Quizzes created by month",
    "sitemetrics-quizzes-created-day": "Quizzes created by day",
    "sitemetrics-quizzes-taken": "Quizzes taken",
    "sitemetrics-quizzes-taken-month": "Quizzes taken by month",
    "sitemetrics-quizzes-taken-day": "Quizzes taken by day",
    # Blogs and voting
    "sitemetrics-new-blogs": "New blog pages",
    "sitemetrics-new-blogs-month": "New blog pages by month",
    "sitemetrics-new-blogs-day": "New blog pages by day",
    "sitemetrics-votes": "Votes and ratings",
    "sitemetrics-votes-month": "Votes and ratings by month",
    "sitemetrics-votes-day": "Votes and ratings by day",
    "sitemetrics-comments": "Comments",
    "sitemetrics-comments-month": "Comments by month",
    "sitemetrics-comments-day": "Comments by day",
    "sitemetrics-invites": "Invitations to read blog page",
    "sitemetrics-invites-month": "Invitations to read blog page by month",
    "sitemetrics-invites-day": "Invitations to read blog page by day",
    # Viral
    "sitemetrics-contact-imports": "Contact invites",
    "sitemetrics-contact-invites-month": "Contact invites by month",
    "sitemetrics-contact-invites-day": "Contact invites by day",
    "sitemetrics-user-recruits": "User recruits",
    "sitemetrics-user-recruits-month": "User recruits by month",
    "sitemetrics-user-recruits-day": "User recruits by day",
}


def msg(key: str, *params: Any) -> str:
    """Look up an interface message, falling back to the key itself."""
    text = MESSAGES.get(key)
    if text is None:
        return f"<{key}>"
    return text.format(*params) if params else text


def is_number(value: Any) -> bool:
    """Whether a count can be charted or compared."""
    if isinstance(value, bool) or not isinstance(value, int | float | Decimal):
        return False
    if isinstance(value, float) and math.isnan(value):
        return False
    if isinstance(value, Decimal) and value.is_nan():
        return False
    return True


def plain_number(value: int | float | Decimal) -> int | float | Decimal:
    """Drop trailing zeros and integral fractions (``Decimal("6.0000")`` -> ``6``)."""
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return int(value)
        return value.normalize()
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def format_number(value: Any) -> str:
    """Format a count for display with the configured thousands separator.

    Non-numeric values are rendered as-is (empty for None).
    """
    if value is None:
        return ""
    if not is_number(value):
        return str(value)

    formatted = f"{plain_number(value):,}"
    separator = settings.thousands_separator
    if separator != ",":
        formatted = formatted.replace(",", separator)
    return formatted
