from .book import crud_book
from .challenge import crud_challenge, crud_participation
from .leaderboard import crud_leaderboard
from .library import crud_library_entry
from .profile import crud_profile
from .reading_activity import crud_reading_activity
from .social import crud_post, crud_post_comment, crud_post_like
from .subscription import crud_subscription

__all__ = [
    "crud_profile",
    "crud_book",
    "crud_library_entry",
    "crud_reading_activity",
    "crud_challenge",
    "crud_participation",
    "crud_leaderboard",
    "crud_post",
    "crud_post_like",
    "crud_post_comment",
    "crud_subscription",
]
