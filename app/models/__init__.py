from app.models.donation import DonationModel, LeaderboardSnapshotModel  # noqa: F401
