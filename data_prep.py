from types import MappingProxyType

import numpy as np
import pandas as pd

from time_features import (
    STATION_STATUS_LABELS,
    STATION_STATUS_DTYPE,
    calculate_ride_duration,
    day_label,
    month_label,
    ride_period_from_hour,
    season_from_month,
)
from trip_loader import TRIP_COLUMNS, validate_imported_data

# Cleaning & validation pipeline for raw Divvy trips
# Produces the cleaned, enriched ride table plus a quality report

# Chicago service area
CHICAGO_BOUNDS = {
    "lat_min": 41.6, "lat_max": 42.1,
    "lng_min": -87.9, "lng_max": -87.5,
}

# Plausibility thresholds
MIN_DURATION_MINS  = 1      # minimum 1 minute
MAX_DURATION_HOURS = 24     # rides of 24 hours or more are dropped
MAX_SPEED_KPH      = 35     # maximum reasonable biking speed in an urban environment
MAX_DISTANCE_KM    = 15     # maximum reasonable trip distance for bike share

# WGS84 equatorial radius, metres
EARTH_RADIUS_M = 6378137.0

COORD_COLUMNS = ["start_lat", "start_lng", "end_lat", "end_lng"]


def haversine_km(lat1, lon1, lat2, lon2, radius_m=EARTH_RADIUS_M):
    """Great-circle distance in kilometres; NaN wherever a coordinate is missing."""
    phi1 = np.radians(lat1)
    phi2 = np.radians(lat2)
    dphi = np.radians(lat2 - lat1)
    dlambda = np.radians(lon2 - lon1)
    a = np.sin(dphi / 2) ** 2 + np.cos(phi1) * np.cos(phi2) * np.sin(dlambda / 2) ** 2
    c = 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))
    return radius_m * c / 1000


def _prepare(df):
    """Copy with every schema column present, timestamps and coordinates typed."""
    extra = [c for c in TRIP_COLUMNS if c not in df.columns]
    out = df.reindex(columns=list(df.columns) + extra)
    for col in ("started_at", "ended_at"):
        out[col] = pd.to_datetime(out[col], errors="coerce", format="ISO8601")
    for col in COORD_COLUMNS:
        out[col] = pd.to_numeric(out[col], errors="coerce").astype("float64")
    return out


def filter_valid_times(df,
                       min_duration_mins=MIN_DURATION_MINS,
                       max_duration_hours=MAX_DURATION_HOURS):
    duration = calculate_ride_duration(df["started_at"], df["ended_at"])
    keep = (
        df["started_at"].notna()
        & df["ended_at"].notna()
        & (df["ended_at"] > df["started_at"])
        & (duration < max_duration_hours * 60)
        & (duration >= min_duration_mins)
    )
    return df.loc[keep]


def filter_service_area(df, bounds=CHICAGO_BOUNDS):
    """Keep rides whose four coordinates all lie in the box (inclusive).

    A missing coordinate fails the range test, so rides without
    coordinates are dropped here.
    """
    lat_ok = lambda c: df[c].between(bounds["lat_min"], bounds["lat_max"])
    lng_ok = lambda c: df[c].between(bounds["lng_min"], bounds["lng_max"])
    keep = lat_ok("start_lat") & lng_ok("start_lng") & lat_ok("end_lat") & lng_ok("end_lng")
    return df.loc[keep]


def add_ride_distance(df):
    return df.assign(
        ride_distance_km=haversine_km(
            df["start_lat"], df["start_lng"], df["end_lat"], df["end_lng"]
        )
    )


def round_trip_flag(start_ids, end_ids):
    """True/False when both station ids are known, NA otherwise."""
    both_known = start_ids.notna() & end_ids.notna()
    return (start_ids == end_ids).astype("boolean").where(both_known)


def station_status(start_valid, end_valid):
    conditions = [
        start_valid & end_valid,
        start_valid & ~end_valid,
        ~start_valid & end_valid,
    ]
    status = np.select(conditions, STATION_STATUS_LABELS[:3], default="Neither Valid")
    return pd.Series(status, index=start_valid.index).astype(STATION_STATUS_DTYPE)


def enrich_trip_features(df):
    started = df["started_at"]
    ride_length_mins = calculate_ride_duration(started, df["ended_at"])
    hour_of_day = started.dt.hour
    start_valid = df["start_station_name"].notna()
    end_valid = df["end_station_name"].notna()
    hours = ride_length_mins / 60

    return df.assign(
        ride_length_mins=ride_length_mins,
        day_of_week=day_label(started),
        month=month_label(started),
        hour_of_day=hour_of_day,
        season=season_from_month(started.dt.month),
        is_weekend=started.dt.dayofweek >= 5,
        ride_period=ride_period_from_hour(hour_of_day),
        speed_kph=(df["ride_distance_km"] / hours).where(hours > 0),
        is_round_trip=round_trip_flag(df["start_station_id"], df["end_station_id"]),
        start_station_valid=start_valid,
        end_station_valid=end_valid,
        station_status=station_status(start_valid, end_valid),
    )


def filter_plausible_trips(df,
                           max_speed_kph=MAX_SPEED_KPH,
                           max_distance_km=MAX_DISTANCE_KM):
    """Drop rides with unrealistic speed or distance; undefined values pass."""
    speed = df["speed_kph"]
    dist = df["ride_distance_km"]
    keep = (speed.isna() | (speed <= max_speed_kph)) & (dist.isna() | (dist <= max_distance_km))
    return df.loc[keep]


def _pct(mask):
    return float(mask.mean() * 100) if len(mask) else float("nan")


def build_quality_report(raw, clean):
    initial_rows = len(raw)
    final_rows = len(clean)
    report = {
        "initial_rows":  initial_rows,
        "final_rows":    final_rows,
        "rows_removed":  initial_rows - final_rows,
        "pct_rows_kept": final_rows / initial_rows * 100 if initial_rows else 0.0,
        "pct_missing_stations":      _pct(clean["start_station_name"].isna()),
        "avg_ride_length":           float(clean["ride_length_mins"].mean()),
        "median_ride_length":        float(clean["ride_length_mins"].median()),
        "pct_valid_coordinates":     _pct(clean["ride_distance_km"].notna()),
        "pct_complete_station_data": _pct(clean["station_status"] == "Both Valid"),
        "duplicate_ride_ids":        int(raw["ride_id"].duplicated().sum()),
    }
    return MappingProxyType(report)


def clean_trip_data(data,
                    bounds=CHICAGO_BOUNDS,
                    max_speed_kph=MAX_SPEED_KPH,
                    max_distance_km=MAX_DISTANCE_KM,
                    min_duration_mins=MIN_DURATION_MINS,
                    max_duration_hours=MAX_DURATION_HOURS):
    """Run the full cleaning pipeline over a raw trip table.

    Steps, each applied to the output of the previous one:

    1. drop rides with missing/reversed timestamps or a duration outside
       [min_duration_mins, max_duration_hours)
    2. drop rides with any coordinate outside ``bounds``
    3. compute ``ride_distance_km``
    4. derive duration, calendar, period, speed and station features
    5. drop rides faster than ``max_speed_kph`` or longer than ``max_distance_km``
    6. build the quality report

    Returns ``(clean_df, quality_report)``. Raises MissingColumnsError if
    ride_id, started_at or ended_at is absent; bad rows are only excluded.
    """
    validate_imported_data(data)

    df = _prepare(data)
    df = filter_valid_times(df, min_duration_mins, max_duration_hours)
    df = filter_service_area(df, bounds)
    df = add_ride_distance(df)
    df = enrich_trip_features(df)
    df = filter_plausible_trips(df, max_speed_kph, max_distance_km)
    df = df.reset_index(drop=True)

    return df, build_quality_report(data, df)


def summarize_station_status(clean):
    """Ride totals, share, duration, distance and member share per station status."""
    summary = (
        clean.assign(is_member=clean["member_casual"] == "member")
             .groupby("station_status", observed=True)
             .agg(total_rides=("ride_id", "size"),
                  avg_duration=("ride_length_mins", "mean"),
                  avg_distance=("ride_distance_km", "mean"),
                  pct_members=("is_member", "mean"))
             .reset_index()
    )
    summary["pct_of_total"] = summary["total_rides"] / len(clean) * 100
    summary["pct_members"] = summary["pct_members"] * 100
    return summary[["station_status", "total_rides", "pct_of_total",
                    "avg_duration", "avg_distance", "pct_members"]]


def filter_complete_rides(clean):
    return clean.loc[clean["station_status"] == "Both Valid"].reset_index(drop=True)
