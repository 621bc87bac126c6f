import pandas as pd
import pandas.testing as pdt
import pytest

from time_features import (
    DAY_LABELS,
    add_time_features,
    calculate_ride_duration,
    get_season,
    ride_period_from_hour,
    season_from_month,
)


def _starts(*stamps):
    return pd.DataFrame({"ride_id": [f"R{i}" for i in range(len(stamps))],
                         "started_at": pd.to_datetime(list(stamps))})


def test_time_of_day_buckets_are_half_open():
    hours = [4, 5, 11, 12, 16, 17, 21, 22]
    df = _starts(*[f"2024-03-04 {h:02d}:30:00" for h in hours])
    out = add_time_features(df)
    assert list(out["time_of_day"].astype(str)) == [
        "Night", "Morning", "Morning", "Afternoon",
        "Afternoon", "Evening", "Evening", "Night",
    ]
    assert list(out["hour"]) == hours


def test_weekday_labels_and_weekend_flag():
    # 2024-01-05 Friday, 06 Saturday, 07 Sunday, 08 Monday
    df = _starts("2024-01-05 10:00", "2024-01-06 10:00", "2024-01-07 10:00", "2024-01-08 10:00")
    out = add_time_features(df)
    assert list(out["day_of_week"].astype(str)) == ["Fri", "Sat", "Sun", "Mon"]
    assert list(out["is_weekend"]) == [False, True, True, False]
    assert list(out["month"].astype(str)) == ["Jan"] * 4
    assert list(out["day_of_week"].cat.categories) == DAY_LABELS
    assert out["day_of_week"].cat.ordered


def test_add_time_features_does_not_mutate_input():
    df = _starts("2024-01-05 10:00")
    before = df.copy()
    add_time_features(df)
    pdt.assert_frame_equal(df, before)


def test_add_time_features_is_idempotent():
    df = _starts("2024-01-05 10:00", "2024-06-01 23:10")
    once = add_time_features(df)
    twice = add_time_features(once)
    pdt.assert_frame_equal(once, twice)
    assert not twice.columns.duplicated().any()


def test_add_time_features_parses_strings():
    df = pd.DataFrame({"started_at": ["2024-01-05 18:00:00", "garbage"]})
    out = add_time_features(df)
    assert out.loc[0, "time_of_day"] == "Evening"
    assert pd.isna(out.loc[1, "day_of_week"])


@pytest.mark.parametrize("month,season", [
    (12, "Winter"), (1, "Winter"), (2, "Winter"),
    (3, "Spring"), (5, "Spring"),
    (6, "Summer"), (8, "Summer"),
    (9, "Fall"), (11, "Fall"),
])
def test_season_mapping(month, season):
    assert get_season(month) == season
    assert season_from_month(pd.Series([month]))[0] == season


def test_ride_period_boundaries():
    hours = pd.Series([5, 6, 9, 10, 15, 16, 18, 19, 0])
    assert list(ride_period_from_hour(hours).astype(str)) == [
        "Night", "Morning Rush", "Morning Rush", "Mid-Day", "Mid-Day",
        "Evening Rush", "Evening Rush", "Night", "Night",
    ]


def test_calculate_ride_duration_minutes():
    start = pd.Series(pd.to_datetime(["2024-01-05 08:00:00"]))
    end = pd.Series(pd.to_datetime(["2024-01-05 08:15:30"]))
    assert calculate_ride_duration(start, end)[0] == pytest.approx(15.5)


def test_season_from_month_keeps_missing_months():
    season = season_from_month(pd.Series([1.0, float("nan"), 10.0]))
    assert season[0] == "Winter"
    assert pd.isna(season[1])
    assert season[2] == "Fall"
