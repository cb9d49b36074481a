# config.py
"""
Application configuration constants for snapframe
"""

# Canvas defaults
DEFAULT_CANVAS_WIDTH = 1200
DEFAULT_CANVAS_HEIGHT = 1080
DEFAULT_LAYOUT = "single"
DEFAULT_BACKGROUND = "#FFFFFF"
MATTE_COLOR = (255, 255, 255, 255)  # JPEG flattening and opaque collage fill

# Object transform limits (UI conventions)
SCALE_MIN = 0.1
SCALE_MAX = 3.0
CELL_SCALE_MIN = 0.5
CELL_SCALE_MAX = 3.0

# Transparency sampling grid bounds (samples per axis)
SAMPLE_GRID_MIN = 10
SAMPLE_GRID_MAX = 100
OPAQUE_ALPHA = 255

# Export settings
EDITOR_QUALITY_DEFAULT = 0.9
COLLAGE_QUALITY_DEFAULT = 1.0
QUALITY_FLOOR = 0.1
BUDGET_SEARCH_ITERATIONS = 6
PNG_COMPRESS_LEVEL = 6
EDITOR_EXPORT_STEM = "edited-image"
COLLAGE_EXPORT_STEM = "collage"

# Cache settings
MAX_CACHE_SIZE = 32
MAX_CACHE_BYTES = 512 << 20  # 512 MB of decoded pixels
CACHE_CLEANUP_THRESHOLD = 0.8  # Cleanup when cache reaches 80% of max size

# Memory monitoring
MEMORY_THRESHOLD_BYTES = 1 << 30  # 1 GB resident set size
MEMORY_CLEANUP_INTERVAL_SECS = 300  # 5 minutes in seconds

# Supported image formats
SUPPORTED_IMAGE_FORMATS = ['png', 'jpg', 'jpeg', 'bmp', 'webp', 'gif', 'tiff']

# Image dimension limits
MAX_IMAGE_DIMENSION = 12000  # Maximum width/height for decoded images

# Preset storage
PRESETS_PATH = "presets.json"
PRESETS_KEY = "customPresets"

# Worker settings
LOAD_WORKERS = 4

# Logging
LOG_FILENAME = "snapframe.log"
LOG_MAX_BYTES = 1_048_576
LOG_BACKUP_COUNT = 5
