"""Static constants for the media-by-aspect-ratio CLI."""

from __future__ import annotations

SLUG = "media-by-aspect-ratio"
NAME_PREFIX = f"{SLUG}-"

# Option (config) and post meta names, both stored with the plugin prefix.
CATALOG_OPTION = "aspect-ratios"
RATIO_ATTRIBUTE = "aspect-ratio"
RATIO_META_KEY = f"{NAME_PREFIX}{RATIO_ATTRIBUTE}"

RATIO_PRECISION = 3

# Matches the host's default max execution time.
DEFAULT_TIME_LIMIT = 30
TIME_LIMIT_MARGIN = 3

DEFAULT_RATIOS = [
    (1, 1, ""),  # square
    (4, 3, ""),  # older monitors, TVs
    (16, 9, ""),  # HD video and wide screens
    (16, 10, ""),  # some tablets and wide screens
]

IMAGE_MIME_TYPE = "image"
ATTACHMENT_STATUS = "inherit"

RATIO_FILTER_PARAM = "media-attachment-ratio-filters"
DATE_FILTER_PARAM = "media-attachment-date-filters"
MODE_PARAM = "mode"

ALL_RATIOS = "all"
ALL_RATIOS_LABEL = "All aspect ratios"
ALL_DATES = "All dates"
DATE_LABEL_FORMAT = "%B %Y"

VIEW_MODES = ("grid", "list")

API_BASE_PATH = "/wp-json/wp/v2"
