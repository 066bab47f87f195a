from .book import Book
from .challenge import Challenge, ChallengeParticipation
from .leaderboard import LeaderboardEntry
from .library_entry import LibraryEntry
from .profile import Profile
from .reading_activity import ReadingActivity
from .social import PostComment, PostLike, SocialPost
from .subscription import Subscription

__all__ = [
    "Profile",
    "Book",
    "LibraryEntry",
    "ReadingActivity",
    "Challenge",
    "ChallengeParticipation",
    "LeaderboardEntry",
    "SocialPost",
    "PostLike",
    "PostComment",
    "Subscription",
]
