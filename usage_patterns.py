import numpy as np
import pandas as pd

from time_features import USAGE_PATTERN_DTYPE

# Rider segmentation: one usage-pattern label per ride, first matching rule wins

RUSH_PERIODS = ["Morning Rush", "Evening Rush"]
COMMUTE_MIN_KM = 1
COMMUTE_MAX_KM = 8


def likely_commuter(df):
    """Rush-hour weekday rides of a typical commute length (1-8 km inclusive)."""
    return (
        df["ride_period"].isin(RUSH_PERIODS)
        & ~df["is_weekend"].astype(bool)
        & df["ride_distance_km"].between(COMMUTE_MIN_KM, COMMUTE_MAX_KM)
    )


def classify_usage_patterns(df):
    """Return a copy of ``df`` with ``likely_commuter`` and ``usage_pattern``.

    Rules are checked in order and the first match wins:
    Commuter, Weekend Leisure, Round Trip, Night Rider, Midday Casual,
    then Mixed Usage for everything else. An unknown round-trip flag
    counts as not a round trip.
    """
    commuter = likely_commuter(df)
    weekend = df["is_weekend"].astype(bool)
    midday = df["ride_period"] == "Mid-Day"
    round_trip = df["is_round_trip"].astype("boolean").fillna(False).astype(bool)

    conditions = [
        commuter,
        weekend & midday,
        round_trip,
        df["ride_period"] == "Night",
        ~weekend & midday,
    ]
    labels = ["Commuter", "Weekend Leisure", "Round Trip", "Night Rider", "Midday Casual"]
    pattern = np.select(conditions, labels, default="Mixed Usage")

    return df.assign(
        likely_commuter=commuter,
        usage_pattern=pd.Series(pattern, index=df.index).astype(USAGE_PATTERN_DTYPE),
    )
