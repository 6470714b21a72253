"""Definitions of every statistic the metrics page can report.

Each definition describes one aggregate over the wiki schema: what to
count, which table(s) to read, the timestamp to bucket on, an optional
filter, and what must be installed for the statistic to be offered. Table
names are written as ``{name}`` placeholders and resolved (prefixed, and
quoted where the dialect needs it) when the catalog builds its SQL.
"""

from dataclasses import dataclass
from string import Formatter

from sitemetrics.services.data_source import SqlDialect

# Navigation sections, in display order
SECTION_CONTENT = "sitemetrics-content-header"
SECTION_USER_SOCIAL = "sitemetrics-user-social-header"
SECTION_POINTS = "sitemetrics-point-stats-header"
SECTION_CASUAL_GAMES = "sitemetrics-casual-game-stats"
SECTION_BLOGS = "sitemetrics-blog-stats-header"
SECTION_VIRAL = "sitemetrics-viral-stats"

SECTIONS = (
    SECTION_CONTENT,
    SECTION_USER_SOCIAL,
    SECTION_POINTS,
    SECTION_CASUAL_GAMES,
    SECTION_BLOGS,
    SECTION_VIRAL,
)

# Page namespaces
NS_MAIN = 0
NS_USER = 2
NS_USER_TALK = 3
NS_VIDEO = 400
NS_BLOG = 500


@dataclass(frozen=True)
class BucketDate:
    """The timestamp expression a statistic is bucketed on, per dialect."""

    mysql: str
    postgres: str

    def for_dialect(self, dialect: SqlDialect) -> str:
        return self.postgres if dialect == SqlDialect.POSTGRES else self.mysql


def wiki_timestamp(column: str) -> BucketDate:
    """A 14-character wiki timestamp column (YYYYMMDDHHMMSS)."""
    return BucketDate(
        mysql=f"FROM_UNIXTIME(UNIX_TIMESTAMP({column}))",
        postgres=column,
    )


def date_column(column: str) -> BucketDate:
    """A native DATE/DATETIME column."""
    return BucketDate(mysql=f"`{column}`", postgres=column)


# Creation time of a page, taken from its first revision
PAGE_CREATED = BucketDate(
    mysql=(
        "(SELECT FROM_UNIXTIME(UNIX_TIMESTAMP(rev_timestamp)) FROM {revision} "
        "WHERE rev_page=page_id ORDER BY rev_timestamp ASC LIMIT 1)"
    ),
    postgres=(
        "(SELECT rev_timestamp FROM {revision} "
        "WHERE rev_page=page_id ORDER BY rev_timestamp ASC LIMIT 1)"
    ),
)

REVISION_JOIN_PAGE = "{revision} INNER JOIN {page} ON rev_page=page_id"


@dataclass(frozen=True)
class StatisticDefinition:
    """How to query and label one statistic."""

    key: str
    section: str
    nav_message: str
    month_message: str
    day_message: str
    source: str
    bucket_date: BucketDate
    where: str | None = None
    count: str = "COUNT(*)"
    required_tables: tuple[str, ...] = ()
    required_features: tuple[str, ...] = ()
    requires_register_track: bool = False

    def table_names(self) -> set[str]:
        """All table placeholders referenced by this statistic's SQL."""
        texts = [
            self.source,
            self.bucket_date.mysql,
            self.bucket_date.postgres,
            self.where or "",
        ]
        names = set()
        for sql in texts:
            for _, name, _, _ in Formatter().parse(sql):
                if name:
                    names.add(name)
        return names


def _simple(
    key: str,
    section: str,
    message: str,
    source: str,
    bucket_date: BucketDate,
    **kwargs,
) -> StatisticDefinition:
    """Definition whose month/day titles follow the ``<message>-month``/``-day`` pattern."""
    return StatisticDefinition(
        key=key,
        section=section,
        nav_message=message,
        month_message=f"{message}-month",
        day_message=f"{message}-day",
        source=source,
        bucket_date=bucket_date,
        **kwargs,
    )


STATISTICS: tuple[StatisticDefinition, ...] = (
    # Content
    StatisticDefinition(
        key="Edits",
        section=SECTION_CONTENT,
        nav_message="sitemetrics-edits",
        month_message="sitemetrics-total-edits-month",
        day_message="sitemetrics-total-edits-day",
        source="{revision}",
        bucket_date=wiki_timestamp("rev_timestamp"),
    ),
    StatisticDefinition(
        key="Main Namespace Edits",
        section=SECTION_CONTENT,
        nav_message="sitemetrics-main-ns",
        month_message="sitemetrics-main-ns-edits-month",
        day_message="sitemetrics-main-ns-edits-day",
        source=REVISION_JOIN_PAGE,
        bucket_date=wiki_timestamp("rev_timestamp"),
        where=f"page_namespace={NS_MAIN}",
    ),
    _simple(
        "New Main Namespace Articles",
        SECTION_CONTENT,
        "sitemetrics-new-articles",
        "{page}",
        PAGE_CREATED,
        where=f"page_namespace={NS_MAIN}",
    ),
    _simple(
        "Anonymous Edits",
        SECTION_CONTENT,
        "sitemetrics-anon-edits",
        (
            "{revision} "
            "INNER JOIN {revision_actor_temp} ON revactor_rev = rev_id "
            "INNER JOIN {actor} ON actor_id = revactor_actor"
        ),
        wiki_timestamp("rev_timestamp"),
        where="actor_user IS NULL",
    ),
    _simple(
        "Images",
        SECTION_CONTENT,
        "sitemetrics-images",
        "{image}",
        wiki_timestamp("img_timestamp"),
    ),
    _simple(
        "Video",
        SECTION_CONTENT,
        "sitemetrics-video",
        "{page}",
        PAGE_CREATED,
        where=f"page_namespace={NS_VIDEO}",
        required_features=("Video",),
    ),
    # User and social. The registration-track variant of New Users wins
    # when available; otherwise new accounts are counted from the user log.
    _simple(
        "New Users",
        SECTION_USER_SOCIAL,
        "sitemetrics-new-users",
        "{user_register_track}",
        date_column("ur_date"),
        required_tables=("user_register_track",),
        requires_register_track=True,
    ),
    _simple(
        "New Users",
        SECTION_USER_SOCIAL,
        "sitemetrics-new-users",
        "{logging}",
        wiki_timestamp("log_timestamp"),
        where="log_type='newusers'",
    ),
    _simple(
        "Avatar Uploads",
        SECTION_USER_SOCIAL,
        "sitemetrics-avatars",
        "{logging}",
        wiki_timestamp("log_timestamp"),
        where="log_type='avatar'",
    ),
    _simple(
        "Profile Updates",
        SECTION_USER_SOCIAL,
        "sitemetrics-profile-updates",
        "{logging}",
        wiki_timestamp("log_timestamp"),
        where="log_type='profile'",
    ),
    _simple(
        "User Page Edits",
        SECTION_USER_SOCIAL,
        "sitemetrics-user-page-edits",
        REVISION_JOIN_PAGE,
        wiki_timestamp("rev_timestamp"),
        where=f"page_namespace={NS_USER}",
    ),
    # Relationships are stored once per side, hence the halving
    _simple(
        "Friendships",
        SECTION_USER_SOCIAL,
        "sitemetrics-friendships",
        "{user_relationship}",
        date_column("r_date"),
        where="r_type=1",
        count="COUNT(*)/2",
    ),
    _simple(
        "Foeships",
        SECTION_USER_SOCIAL,
        "sitemetrics-foeships",
        "{user_relationship}",
        date_column("r_date"),
        where="r_type=2",
        count="COUNT(*)/2",
    ),
    _simple(
        "Gifts",
        SECTION_USER_SOCIAL,
        "sitemetrics-gifts",
        "{user_gift}",
        date_column("ug_date"),
    ),
    _simple(
        "Wall Messages",
        SECTION_USER_SOCIAL,
        "sitemetrics-wall-messages",
        "{user_board}",
        date_column("ub_date"),
    ),
    _simple(
        "User Talk Messages",
        SECTION_USER_SOCIAL,
        "sitemetrics-talk-messages",
        REVISION_JOIN_PAGE,
        wiki_timestamp("rev_timestamp"),
        where=f"page_namespace={NS_USER_TALK}",
    ),
    # Points
    _simple(
        "Awards",
        SECTION_POINTS,
        "sitemetrics-awards",
        "{user_system_gift}",
        date_column("sg_date"),
    ),
    _simple(
        "Honorific Advancements",
        SECTION_POINTS,
        "sitemetrics-honorifics",
        "{user_system_messages}",
        date_column("um_date"),
    ),
    # Casual games
    _simple(
        "Polls Created",
        SECTION_CASUAL_GAMES,
        "sitemetrics-polls-created",
        "{poll_question}",
        date_column("poll_date"),
        required_features=("PollNY",),
    ),
    _simple(
        "Polls Taken",
        SECTION_CASUAL_GAMES,
        "sitemetrics-polls-taken",
        "{poll_user_vote}",
        date_column("pv_date"),
        required_features=("PollNY",),
    ),
    _simple(
        "Picture Games Created",
        SECTION_CASUAL_GAMES,
        "sitemetrics-picgames-created",
        "{picturegame_images}",
        date_column("pg_date"),
        required_features=("PictureGame",),
    ),
    _simple(
        "Picture Games Taken",
        SECTION_CASUAL_GAMES,
        "sitemetrics-picgames-taken",
        "{picturegame_votes}",
        date_column("vote_date"),
        required_features=("PictureGame",),
    ),
    _simple(
        "Quizzes Created",
        SECTION_CASUAL_GAMES,
        "sitemetrics-quizzes-created",
        "{quizgame_questions}",
        date_column("q_date"),
        required_features=("QuizGame",),
    ),
    _simple(
        "Quizzes Taken",
        SECTION_CASUAL_GAMES,
        "sitemetrics-quizzes-taken",
        "{quizgame_answers}",
        date_column("a_date"),
        required_features=("QuizGame",),
    ),
    # Blogs and voting
    _simple(
        "New Blog Pages",
        SECTION_BLOGS,
        "sitemetrics-new-blogs",
        "{page}",
        PAGE_CREATED,
        where=f"page_namespace={NS_BLOG}",
        required_features=("BlogPage",),
    ),
    _simple(
        "Votes and Ratings",
        SECTION_BLOGS,
        "sitemetrics-votes",
        "{Vote}",
        date_column("Vote_Date"),
        required_tables=("Vote",),
    ),
    _simple(
        "Comments",
        SECTION_BLOGS,
        "sitemetrics-comments",
        "{Comments}",
        date_column("Comment_Date"),
        required_tables=("Comments",),
    ),
    _simple(
        "Invitations to Read Blog Page",
        SECTION_BLOGS,
        "sitemetrics-invites",
        "{user_email_track}",
        date_column("ue_date"),
        where="ue_type = 4",
        count="SUM(ue_count)",
        required_tables=("user_email_track",),
        required_features=("MiniInvite",),
    ),
    # Viral
    StatisticDefinition(
        key="Contact Invites",
        section=SECTION_VIRAL,
        nav_message="sitemetrics-contact-imports",
        month_message="sitemetrics-contact-invites-month",
        day_message="sitemetrics-contact-invites-day",
        source="{user_email_track}",
        bucket_date=date_column("ue_date"),
        where="ue_type IN (1,2,3)",
        count="SUM(ue_count)",
        required_tables=("user_email_track",),
    ),
    _simple(
        "User Recruits",
        SECTION_VIRAL,
        "sitemetrics-user-recruits",
        "{user_register_track}",
        date_column("ur_date"),
        where="ur_actor_referral IS NOT NULL",
        required_tables=("user_register_track",),
        requires_register_track=True,
    ),
)
