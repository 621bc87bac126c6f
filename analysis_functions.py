import pandas as pd

from usage_patterns import RUSH_PERIODS

# Aggregations over the cleaned ride table, grouped by rider type
# None of these modify their input

TOP_N = 20
RIDER_COL = "member_casual"


def _ride_summary(data, keys):
    return (
        data.groupby(keys, observed=True)
            .agg(rides=("ride_id", "size"),
                 avg_duration=("ride_length_mins", "mean"))
            .reset_index()
    )


def _top_n(df, count_col, keys, n):
    """Highest ``count_col`` first; ties broken by the grouping keys in ascending order."""
    ordered = df.sort_values(
        [count_col] + keys,
        ascending=[False] + [True] * len(keys),
        kind="mergesort",
    )
    return ordered.head(n).reset_index(drop=True)


def analyze_temporal_patterns(data):
    hourly   = _ride_summary(data, [RIDER_COL, "hour_of_day"])
    weekly   = _ride_summary(data, [RIDER_COL, "day_of_week", "is_weekend"])
    seasonal = _ride_summary(data, [RIDER_COL, "season", "month"])
    return {"hourly": hourly, "weekly": weekly, "seasonal": seasonal}


def analyze_trip_characteristics(data):
    """Per rider type: ride counts, mean duration/distance, round-trip share and distance quartiles.

    Unknown distances and round-trip flags are left out of the means.
    """
    trips = data.assign(round_trip=data["is_round_trip"].astype("boolean").astype("float64"))
    metrics = (
        trips.groupby(RIDER_COL, observed=True)
             .agg(total_rides=("ride_id", "size"),
                  avg_duration=("ride_length_mins", "mean"),
                  avg_distance=("ride_distance_km", "mean"),
                  pct_round_trips=("round_trip", "mean"))
             .reset_index()
    )
    metrics["pct_round_trips"] = metrics["pct_round_trips"] * 100

    grp = data.groupby(RIDER_COL, observed=True)["ride_distance_km"]
    distance_dist = pd.DataFrame({
        "q25":    grp.quantile(0.25),
        "median": grp.median(),
        "q75":    grp.quantile(0.75),
    }).reset_index()

    return {"metrics": metrics, "distance_dist": distance_dist}


def analyze_popular_routes(data, top_n=TOP_N):
    route_keys = ["start_station_name", "end_station_name", RIDER_COL]
    routes = (
        data.groupby(route_keys, observed=True)
            .agg(total_trips=("ride_id", "size"),
                 avg_duration=("ride_length_mins", "mean"),
                 avg_distance=("ride_distance_km", "mean"))
            .reset_index()
    )
    routes = _top_n(routes, "total_trips", route_keys, top_n)

    # a station counts once as a start and once as an end
    uses = data.melt(
        id_vars=[RIDER_COL],
        value_vars=["start_station_name", "end_station_name"],
        var_name="station_type",
        value_name="station_name",
    )
    stations = (
        uses.groupby(["station_name", RIDER_COL], observed=True)
            .size()
            .rename("total_uses")
            .reset_index()
    )
    stations = _top_n(stations, "total_uses", ["station_name", RIDER_COL], top_n)

    return {"routes": routes, "stations": stations}


def analyze_user_segments(data):
    segments = (
        data.groupby([RIDER_COL, "usage_pattern"], observed=True)
            .agg(total_rides=("ride_id", "size"),
                 avg_duration=("ride_length_mins", "mean"),
                 avg_distance=("ride_distance_km", "mean"))
            .reset_index()
    )
    type_totals = segments.groupby(RIDER_COL, observed=True)["total_rides"].transform("sum")
    segments["pct_of_type"] = segments["total_rides"] / type_totals * 100

    commuters = data.loc[data["likely_commuter"].astype(bool)]
    commuter_stats = (
        commuters.groupby(RIDER_COL, observed=True)
                 .agg(regular_commuters=("ride_id", "nunique"),
                      avg_commute_distance=("ride_distance_km", "mean"),
                      common_start_time=("hour_of_day", "median"))
                 .reset_index()
    )
    return {"segments": segments, "commuter_stats": commuter_stats}


def analyze_usage_patterns(data):
    usage = (
        data.groupby([RIDER_COL, "usage_pattern"], observed=True)
            .size()
            .rename("total_rides")
            .reset_index()
    )
    # share within each rider type
    type_totals = usage.groupby(RIDER_COL, observed=True)["total_rides"].transform("sum")
    usage["percentage"] = usage["total_rides"] / type_totals * 100
    return usage


def analyze_top_stations(data, top_n=TOP_N):
    """Busiest start stations per rider type, with the share of rides taken in rush hours."""
    stations = (
        data.assign(commute_hours=data["ride_period"].isin(RUSH_PERIODS))
            .groupby(["start_station_name", RIDER_COL], observed=True)
            .agg(total_rides=("ride_id", "size"),
                 pct_commute_hours=("commute_hours", "mean"))
            .reset_index()
    )
    stations["pct_commute_hours"] = stations["pct_commute_hours"] * 100
    stations = stations.sort_values(
        [RIDER_COL, "total_rides", "start_station_name"],
        ascending=[True, False, True],
        kind="mergesort",
    )
    return stations.groupby(RIDER_COL, observed=True).head(top_n).reset_index(drop=True)


def summarize_top_stations(station_analysis):
    return (
        station_analysis.groupby(RIDER_COL, observed=True)
                        .agg(avg_commute_pct=("pct_commute_hours", "mean"))
                        .reset_index()
    )
