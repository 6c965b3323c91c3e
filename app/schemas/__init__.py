from app.schemas.base import (  # noqa: F401
    HANDLE_PATTERN,
    AckResponse,
    CleanupResponse,
    ClearResponse,
    Donation,
    DonationStats,
    DonationWebhookPayload,
    IngestResponse,
    LatestResponse,
    LeaderboardResponse,
    LeaderboardSnapshot,
    LeaderboardSyncRequest,
    LeaderboardSyncResponse,
    PendingResponse,
    StatsResponse,
    StatusResponse,
)
