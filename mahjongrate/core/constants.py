"""Global constants for the mahjongrate application."""

# Collection names (shared with the mobile client)
MEMBERS_COLLECTION = "members"
GAME_RECORDS_COLLECTION = "gameRecords"
GAME_RESULTS_COLLECTION = "gameResults"
GAME_ROUNDS_COLLECTION = "gameRounds"
SCORES_COLLECTION = "scores"
PLAYERS_COLLECTION = "players"
PENDING_MEMBERS_COLLECTION = "pendingMembers"

# Fields on 'gameRecords' documents
RECORD_MEMBER_IDS = "memberIDs"
RECORD_CREATED_BY = "createdBy"
RECORD_UPDATED_AT = "updatedAt"

# Fields on 'members' documents
MEMBER_ICON_URL = "iconURL"
MEMBER_ICON_PATH = "iconPath"

# Fields on 'pendingMembers' documents
PENDING_MEMBER_ID = "memberID"

# Cleanup defaults
PRUNE_BATCH_SIZE = 200
LIST_USERS_PAGE_SIZE = 1000
UNVERIFIED_USER_MAX_AGE_MINUTES = 60
SWEEP_INTERVAL_MINUTES = 60

# Callable request confirmation
DELETE_ACCOUNT_CONFIRMATION = "DELETE"

GS_URL_SCHEME = "gs://"
