"""Application constants."""

USER_AGENT = "city-seed/1.0 (+seed loader)"
CATEGORY_LOCATION_DATA = "location_data"
CATEGORY_OCCUPATION_DATA = "occupation_data"
CATEGORIES = (CATEGORY_LOCATION_DATA, CATEGORY_OCCUPATION_DATA)
PROGRESS_CADENCE = 27
PROGRESS_DENOMINATOR = 270
START_MESSAGE = "Parsing Data. Building Tables. Please wait..."
FINISH_MESSAGE = "Up and running!"
DEFAULT_DATABASE_URL = "sqlite:///data/city_seed.db"
EXIT_SUCCESS = 0
EXIT_PARTIAL = 10
EXIT_HARD_FAIL = 20
JSON_LOG_FIELDS = (
    "timestamp",
    "run_id",
    "stage",
    "location",
    "category",
    "event",
    "status",
    "records",
    "percent",
    "error_code",
    "message",
)
