import numpy as np
import pandas as pd

# Time-based feature helpers shared by the cleaning pipeline and the analysis scripts

# Fixed category levels, used for stable table and chart axis ordering
DAY_LABELS    = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
MONTH_LABELS  = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
                 "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
SEASON_LABELS = ["Winter", "Spring", "Summer", "Fall"]
TIME_OF_DAY_LABELS = ["Morning", "Afternoon", "Evening", "Night"]
RIDE_PERIOD_LABELS = ["Morning Rush", "Mid-Day", "Evening Rush", "Night"]
STATION_STATUS_LABELS = ["Both Valid", "Start Only", "End Only", "Neither Valid"]
USAGE_PATTERN_LABELS = [
    "Commuter",
    "Weekend Leisure",
    "Round Trip",
    "Midday Casual",
    "Mixed Usage",
    "Night Rider",
]

DAY_DTYPE    = pd.CategoricalDtype(DAY_LABELS, ordered=True)
MONTH_DTYPE  = pd.CategoricalDtype(MONTH_LABELS, ordered=True)
SEASON_DTYPE = pd.CategoricalDtype(SEASON_LABELS, ordered=True)
TIME_OF_DAY_DTYPE = pd.CategoricalDtype(TIME_OF_DAY_LABELS, ordered=True)
RIDE_PERIOD_DTYPE = pd.CategoricalDtype(RIDE_PERIOD_LABELS, ordered=True)
STATION_STATUS_DTYPE = pd.CategoricalDtype(STATION_STATUS_LABELS, ordered=True)
USAGE_PATTERN_DTYPE  = pd.CategoricalDtype(USAGE_PATTERN_LABELS, ordered=True)

WEEKEND_DAYS = ["Sat", "Sun"]


def calculate_ride_duration(start_time, end_time):
    """Elapsed minutes between two timestamps (scalars or Series)."""
    return (end_time - start_time) / pd.Timedelta(minutes=1)


def get_season(month):
    if month in [12, 1, 2]: return 'Winter'
    if month in [3, 4, 5]: return 'Spring'
    if month in [6, 7, 8]: return 'Summer'
    return 'Fall'


def season_from_month(month):
    """get_season over a Series of month numbers (1-12); missing months stay missing."""
    return month.map(get_season, na_action="ignore").astype(SEASON_DTYPE)


def ride_period_from_hour(hour):
    """Bucket hour of day into rush-hour periods; half-open intervals."""
    conditions = [
        (hour >= 6) & (hour < 10),
        (hour >= 10) & (hour < 16),
        (hour >= 16) & (hour < 19),
    ]
    labels = RIDE_PERIOD_LABELS[:3]
    period = np.select(conditions, labels, default="Night")
    return pd.Series(period, index=hour.index).astype(RIDE_PERIOD_DTYPE)


def time_of_day_from_hour(hour):
    conditions = [
        (hour >= 5) & (hour < 12),
        (hour >= 12) & (hour < 17),
        (hour >= 17) & (hour < 22),
    ]
    labels = TIME_OF_DAY_LABELS[:3]
    bucket = np.select(conditions, labels, default="Night")
    return pd.Series(bucket, index=hour.index).astype(TIME_OF_DAY_DTYPE)


def day_label(timestamps):
    return timestamps.dt.day_name().str[:3].astype(DAY_DTYPE)


def month_label(timestamps):
    return timestamps.dt.month_name().str[:3].astype(MONTH_DTYPE)


def add_time_features(df, column="started_at"):
    """Return a copy of ``df`` with hour, day_of_week, month, is_weekend and time_of_day.

    The input frame is left untouched. Existing feature columns are
    overwritten, so running this twice gives the same columns as running it once.
    """
    started = pd.to_datetime(df[column], errors="coerce", format="ISO8601")
    day_of_week = day_label(started)
    return df.assign(
        hour=started.dt.hour,
        day_of_week=day_of_week,
        month=month_label(started),
        is_weekend=day_of_week.isin(WEEKEND_DAYS),
        time_of_day=time_of_day_from_hour(started.dt.hour),
    )
