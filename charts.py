import os
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import seaborn as sns

from time_features import DAY_LABELS, MONTH_LABELS, USAGE_PATTERN_LABELS

# Charts for the ridership report, one PNG per figure

OUTPUT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), 'output'))

# Blue for members, yellow for casual riders
RIDER_COLORS = {"member": "#2E86AB", "casual": "#F6B018"}
RIDER_LABELS = {"member": "Annual Members", "casual": "Casual Riders"}

sns.set(style="whitegrid")
plt.rcParams.update({"figure.dpi": 120})


def save_fig(fname, output_dir=OUTPUT_DIR):
    os.makedirs(output_dir, exist_ok=True)
    path = os.path.join(output_dir, fname)
    plt.tight_layout()
    plt.savefig(path)
    plt.close()
    return path


def _as_str(df, *cols):
    # seaborn draws every category level; plain strings keep only the observed ones
    return df.assign(**{c: df[c].astype(str) for c in cols})


def create_hourly_pattern_plot(hourly, output_dir=OUTPUT_DIR):
    plt.figure(figsize=(10, 5))
    sns.lineplot(data=_as_str(hourly, "member_casual"), x="hour_of_day", y="rides",
                 hue="member_casual", palette=RIDER_COLORS, marker="o", linewidth=1.2)
    plt.xticks(range(24), [f"{h:02d}:00" for h in range(24)], rotation=45)
    plt.xlabel("Time of Day")
    plt.ylabel("Number of Rides")
    plt.title("Hourly Ridership Patterns")
    plt.legend(title="Rider Type")
    return save_fig("hourly_pattern.png", output_dir)


def create_weekly_pattern_plot(weekly, output_dir=OUTPUT_DIR):
    plt.figure(figsize=(9, 5))
    sns.barplot(data=_as_str(weekly, "member_casual", "day_of_week"), x="day_of_week", y="rides",
                hue="member_casual", order=DAY_LABELS, palette=RIDER_COLORS, errorbar=None)
    plt.xlabel("Day of Week")
    plt.ylabel("Number of Rides")
    plt.title("Weekly Ridership Patterns")
    plt.legend(title="Rider Type")
    return save_fig("weekly_pattern.png", output_dir)


def create_seasonal_pattern_plot(seasonal, output_dir=OUTPUT_DIR):
    monthly = (
        seasonal.groupby(["member_casual", "month"], observed=True)["rides"]
                .sum()
                .reset_index()
    )
    plt.figure(figsize=(10, 5))
    ax = plt.gca()
    for rider, grp in monthly.groupby("member_casual", observed=True):
        grp = grp.sort_values("month")
        ax.plot(grp["month"].cat.codes, grp["rides"], marker="o",
                color=RIDER_COLORS.get(str(rider)), label=str(rider))
    ax.set_xticks(range(len(MONTH_LABELS)))
    ax.set_xticklabels(MONTH_LABELS)
    plt.xlabel("Month")
    plt.ylabel("Number of Rides")
    plt.title("Seasonal Ridership Patterns")
    plt.legend(title="Rider Type")
    return save_fig("seasonal_pattern.png", output_dir)


def create_trip_duration_plot(data, output_dir=OUTPUT_DIR):
    plt.figure(figsize=(9, 5))
    sns.kdeplot(data=_as_str(data, "member_casual"), x="ride_length_mins", hue="member_casual",
                palette=RIDER_COLORS, fill=True, alpha=0.7, clip=(0, 60), common_norm=False)
    plt.xlim(0, 60)
    plt.xlabel("Duration (minutes)")
    plt.ylabel("Density")
    plt.title("Trip Duration Distribution")
    return save_fig("trip_duration.png", output_dir)


def create_trip_distance_plot(data, output_dir=OUTPUT_DIR):
    plt.figure(figsize=(9, 5))
    sns.kdeplot(data=_as_str(data.dropna(subset=["ride_distance_km"]), "member_casual"),
                x="ride_distance_km", hue="member_casual", palette=RIDER_COLORS,
                fill=True, alpha=0.7, clip=(0, 10), common_norm=False)
    plt.xlim(0, 10)
    plt.xlabel("Distance (kilometers)")
    plt.ylabel("Density")
    plt.title("Trip Distance Distribution")
    return save_fig("trip_distance.png", output_dir)


def create_top_stations_plot(station_analysis, output_dir=OUTPUT_DIR):
    riders = [r for r in RIDER_COLORS if (station_analysis["member_casual"] == r).any()]
    fig, axes = plt.subplots(1, max(len(riders), 1), figsize=(14, 8), squeeze=False)
    for ax, rider in zip(axes[0], riders):
        grp = (
            station_analysis.loc[station_analysis["member_casual"] == rider]
                            .sort_values("total_rides")
        )
        ax.barh(grp["start_station_name"].astype(str), grp["total_rides"],
                color=plt.cm.Oranges(grp["pct_commute_hours"].to_numpy() / 100))
        ax.set_title(RIDER_LABELS[rider])
        ax.set_xlabel("Total Number of Rides")
        ax.tick_params(axis="y", labelsize=8)
    fig.suptitle("Most Popular Start Stations (shade = % commute hours)")
    return save_fig("top_stations.png", output_dir)


def create_usage_patterns_plot(usage, output_dir=OUTPUT_DIR):
    plt.figure(figsize=(10, 5))
    sns.barplot(data=_as_str(usage, "member_casual", "usage_pattern"), x="usage_pattern",
                y="percentage", hue="member_casual", order=USAGE_PATTERN_LABELS,
                palette=RIDER_COLORS, errorbar=None)
    plt.xticks(rotation=45, ha="right")
    plt.xlabel("Usage Pattern")
    plt.ylabel("Percentage of Total Rides")
    plt.title("Usage Patterns by Rider Type")
    plt.legend(title="Rider Type")
    return save_fig("usage_patterns.png", output_dir)
