"""Constants for knowledge-graph queries and geographic filtering."""

# Wikidata properties
P_COORDINATE_LOCATION = "P625"
P_INSTANCE_OF = "P31"
P_POINT_IN_TIME = "P585"
P_START_TIME = "P580"
P_INCEPTION = "P571"
P_END_TIME = "P582"
P_IMAGE = "P18"

ENGLISH_WIKIPEDIA_PREFIX = "https://en.wikipedia.org/"

# Geometry
EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE_LAT = 111.32
BBOX_BUFFER_DEGREES = 0.1
POLAR_CAP_LAT = 89.0

# Request limits
MIN_RADIUS_KM = 1.0
MAX_RADIUS_KM = 500.0
DEFAULT_START_YEAR = 1500
MAX_RESULTS = 50

# Result caps per query tier
PRIMARY_LIMIT = 500
SIMPLIFIED_LIMIT = 100
FALLBACK_LIMIT = 50

# Units
MILES_TO_KM = 1.60934

UNKNOWN_DATE = "Unknown date"
UNKNOWN_LABEL = "Unknown"

GENERIC_UPSTREAM_ERROR = "Failed to fetch historical events"
