"""
Global configuration for the FootyExport project.

This module centralizes paths, source locations and CLI defaults, so you can
tweak them in one place. Components receive an `ExportConfig` explicitly
instead of reading these constants directly.
"""

from dataclasses import dataclass
from pathlib import Path

# Project root = folder that contains "src", "data", "output", etc.
PROJECT_ROOT: Path = Path(__file__).resolve().parents[2]

# Local copy of the football.json tree, laid out as {country}/{season}/...
DATA_DIR: Path = PROJECT_ROOT / "data"
LOCAL_DATA_DIR: Path = DATA_DIR / "football.json"

# Exported CSV artifacts
OUTPUT_DIR: Path = PROJECT_ROOT / "output"

# Remote source (versioned JSON repository)
REMOTE_BASE_URL: str = (
    "https://raw.githubusercontent.com/openfootball/football.json/master"
)
REMOTE_TIMEOUT_SECONDS: float = 30.0

# Log record layout used by the CLI and by loggers created before any setup
LOG_FORMAT: str = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
LOG_LEVEL: str = "INFO"

# CLI defaults
DEFAULT_YEAR: int = 16
DEFAULT_COUNTRY: str = "de"
DEFAULT_LEAGUE: str = "1"

# Number of leading matchdays ignored in training data
MIN_MATCHES: int = 5

# Rolling form windows (number of previous matches per club)
FORM_WINDOWS: tuple[int, ...] = (3, 5)

# Label column
TARGET_COLUMN: str = "result"

# Marker column added to the combined (full) export
SOURCE_SET_COLUMN: str = "source_set"

# Club metadata (transfermarkt.de). Only the 1. Bundesliga clubs are mapped.
TRANSFERMARKT_BASE_URL: str = "https://www.transfermarkt.de"
TRANSFERMARKT_TIMEOUT_SECONDS: float = 10.0
CLUB_META_IDS: dict[str, int] = {
    "FCB": 27,
    "BVB": 16,
    "B04": 15,
    "S04": 33,
    "WOB": 82,
    "BMG": 18,
    "TSG": 533,
    "BSC": 44,
    "KOE": 3,
    "M05": 39,
    "SVW": 86,
    "HSV": 41,
    "SGE": 24,
    "FCA": 167,
    "FCI": 4795,
    "D98": 105,
    "VFB": 79,
    "H96": 42,
    "SCF": 60,
    "RBL": 23826,
}


@dataclass(frozen=True)
class ExportConfig:
    """
    Locations and limits used by one export run.

    Attributes
    ----------
    output_dir : Path
        Directory the CSV artifacts are written to. Must already exist.
    local_data_dir : Path
        Root of the local football.json tree used by the local provider.
    remote_base_url : str
        Base URL of the remote football.json repository.
    timeout_seconds : float
        HTTP timeout for the remote provider.
    """

    output_dir: Path = OUTPUT_DIR
    local_data_dir: Path = LOCAL_DATA_DIR
    remote_base_url: str = REMOTE_BASE_URL
    timeout_seconds: float = REMOTE_TIMEOUT_SECONDS
