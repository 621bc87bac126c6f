import os
import re
import pandas as pd

# Loads and concatenates the monthly Divvy trip files into one raw table

TRIP_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), 'data', 'bikes_raw'))
FILE_PATTERN = re.compile(r".*\.csv$")

# Fixed 13-column trip schema
TRIP_DTYPES = {
    "ride_id":            "string",
    "rideable_type":      "category",
    "start_station_name": "string",
    "start_station_id":   "string",
    "end_station_name":   "string",
    "end_station_id":     "string",
    "start_lat":          "float64",
    "start_lng":          "float64",
    "end_lat":            "float64",
    "end_lng":            "float64",
    "member_casual":      "category",
}
DATE_COLUMNS = ["started_at", "ended_at"]
TRIP_COLUMNS = [
    "ride_id", "rideable_type", "started_at", "ended_at",
    "start_station_name", "start_station_id",
    "end_station_name", "end_station_id",
    "start_lat", "start_lng", "end_lat", "end_lng",
    "member_casual",
]
REQUIRED_COLUMNS = ["ride_id", "started_at", "ended_at"]


class MissingColumnsError(ValueError):
    """Raised when a trip table lacks one of the required identity/timestamp columns."""

    def __init__(self, missing):
        self.missing = list(missing)
        super().__init__(f"Missing required columns: {', '.join(self.missing)}")


def validate_imported_data(df):
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise MissingColumnsError(missing)
    return df


def find_trip_files(trip_root=TRIP_ROOT, pattern=FILE_PATTERN):
    """Every trip CSV under ``trip_root``, skipping macOS metadata, sorted by name."""
    files = []
    for root, _, fnames in os.walk(trip_root):
        if "__MACOSX" in root:
            continue
        for fn in fnames:
            if fn.startswith("._"):
                continue
            if pattern.match(fn):
                files.append(os.path.join(root, fn))
    return sorted(files)


def import_monthly_data(path):
    """Read one monthly file with the standard column names and types.

    Column names are normalised to snake_case before typing. Timestamps that
    fail to parse become NaT and are left for the cleaning step to drop.
    """
    df = pd.read_csv(path, dtype=str)
    df.columns = (
        df.columns.str.strip()
                  .str.lower()
                  .str.replace(r"[^0-9a-z]+", "_", regex=True)
                  .str.strip("_")
    )
    validate_imported_data(df)
    for col in DATE_COLUMNS:
        df[col] = pd.to_datetime(df[col], errors="coerce", format="ISO8601")
    for col, dtype in TRIP_DTYPES.items():
        if col not in df.columns:
            continue
        if dtype == "float64":
            df[col] = pd.to_numeric(df[col], errors="coerce")
        else:
            df[col] = df[col].astype(dtype)
    return df


def load_trip_data(trip_root=TRIP_ROOT, pattern=FILE_PATTERN):
    """Load and concatenate all monthly trip files into one raw table.

    Raises FileNotFoundError when no file matches and MissingColumnsError
    when a file lacks ride_id/started_at/ended_at.
    """
    files = find_trip_files(trip_root, pattern)
    if not files:
        raise FileNotFoundError(f"No trip files found under {trip_root}")

    dfs = [import_monthly_data(fp) for fp in files]
    trips = pd.concat(dfs, ignore_index=True)
    # categories differ per file, so concat falls back to object
    for col in ("rideable_type", "member_casual"):
        if col in trips.columns:
            trips[col] = trips[col].astype("category")
    return trips
