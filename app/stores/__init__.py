from app.stores.base import DonationStore  # noqa: F401
from app.stores.leaderboard import LeaderboardCache, LeaderboardStore, SqlLeaderboardCache  # noqa: F401
from app.stores.memory import BoundedDonationStore  # noqa: F401
from app.stores.sql import SqlDonationStore  # noqa: F401
