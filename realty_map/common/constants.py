"""Application constants."""

EXIT_SUCCESS = 0
EXIT_HARD_FAIL = 20

REQUIRED_COLUMNS = (
    "id",
    "geo_lat",
    "geo_lng",
    "price",
    "name",
    "rooms_type_id",
    "total_area",
    "realty_type_id",
)

APARTMENT_TYPE_ID = 1
PROPERTY_TYPE_LABELS = {
    1: "Квартира",
    2: "Дом",
    3: "Коммерческая",
}
TITLE_PLACEHOLDER = "Объект недвижимости #{id}"

DEFAULT_BATCH_SIZE = 1000
DEFAULT_WORKERS = 8
DEFAULT_QUEUE_FACTOR = 2
DEFAULT_PROPERTY_LIMIT = 1000

WEB_MERCATOR_HALF_EXTENT = 20037508.34
WEB_MERCATOR_WORLD_SIZE = WEB_MERCATOR_HALF_EXTENT * 2
DEFAULT_ZOOM_OFFSET = 2
DEFAULT_TILE_SIZE_PX = 256
# Deepest zoom accepted by cluster queries; map tiles stop well before it.
MAX_ZOOM = 30

JSON_LOG_FIELDS = (
    "timestamp",
    "run_id",
    "stage",
    "event",
    "status",
    "worker_id",
    "batch_size",
    "rows_in",
    "rows_out",
    "rate",
    "duration_ms",
    "error_code",
    "message",
)
