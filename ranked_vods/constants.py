"""Fixed values shared by the ranked VOD pipeline."""

# Page sizes for the match listing endpoints
API_MAX_RESULTS = 100  # all users: most players don't have a public vod
API_MAX_RESULTS_USER_PAGE = 60  # single user

# Seasons before this one carry no VOD data upstream
MIN_VOD_SEASON = 8
SEASON_ERROR_MESSAGE = (
    "Season must be a number greater than or equal to 8. "
    "The MCSR Ranked API does not show VODs for earlier seasons."
)

# Links land this many seconds before the death
VOD_TIMESTAMP_PADDING = 10

# Upstream wire values
DEATH_TIMELINE_TYPE = "projectelo.timeline.death"
PLAYER_NOT_EXIST_ERROR = "This player is not exist."
USER_NOT_FOUND_MESSAGE = "This user does not exist."

# Death labels are shown in German numeric format, Berlin time
LABEL_TIMEZONE = "Europe/Berlin"

# Max characters of an offending payload quoted in validation errors
PAYLOAD_EXCERPT_CHARS = 500
