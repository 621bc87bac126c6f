import os
import sys
import subprocess
import pandas as pd

import charts
from analysis_functions import (
    TOP_N,
    analyze_popular_routes,
    analyze_temporal_patterns,
    analyze_top_stations,
    analyze_trip_characteristics,
    analyze_usage_patterns,
    analyze_user_segments,
    summarize_top_stations,
)
from data_prep import clean_trip_data, filter_complete_rides, summarize_station_status
from generate_report import build_report_tex, write_report
from maps_analysis import save_station_maps
from trip_loader import load_trip_data
from usage_patterns import classify_usage_patterns

# End-to-end case study: load -> clean -> segment -> aggregate -> charts, maps, report

BASE_DIR   = os.path.dirname(os.path.abspath(__file__))
TRIP_ROOT  = os.environ.get("DIVVY_TRIP_ROOT", os.path.join(BASE_DIR, "data", "bikes_raw"))
OUTPUT_DIR = os.environ.get("DIVVY_OUTPUT_DIR", os.path.join(BASE_DIR, "output"))


def run_pipeline(raw, top_n=TOP_N):
    """Everything between the raw table and the rendered outputs.

    Each stage receives the previous stage's result explicitly. Returns a
    dict with the cleaned table, complete rides, quality report and every
    aggregation.
    """
    cleaned, quality_report = clean_trip_data(raw)
    station_comparison = summarize_station_status(cleaned)
    complete_rides = classify_usage_patterns(filter_complete_rides(cleaned))

    station_analysis = analyze_top_stations(complete_rides, top_n)
    return {
        "cleaned":            cleaned,
        "quality_report":     quality_report,
        "station_comparison": station_comparison,
        "complete_rides":     complete_rides,
        "temporal":           analyze_temporal_patterns(complete_rides),
        "trips":              analyze_trip_characteristics(complete_rides),
        "routes":             analyze_popular_routes(complete_rides, top_n),
        "segments":           analyze_user_segments(complete_rides),
        "usage":              analyze_usage_patterns(complete_rides),
        "station_analysis":   station_analysis,
        "station_summary":    summarize_top_stations(station_analysis),
    }


def save_tables(results, output_dir=OUTPUT_DIR):
    os.makedirs(output_dir, exist_ok=True)
    tables = {
        "quality_report":       pd.DataFrame([dict(results["quality_report"])]),
        "station_comparison":   results["station_comparison"],
        "hourly_patterns":      results["temporal"]["hourly"],
        "weekly_patterns":      results["temporal"]["weekly"],
        "seasonal_patterns":    results["temporal"]["seasonal"],
        "trip_metrics":         results["trips"]["metrics"],
        "distance_distribution": results["trips"]["distance_dist"],
        "popular_routes":       results["routes"]["routes"],
        "popular_stations":     results["routes"]["stations"],
        "user_segments":        results["segments"]["segments"],
        "commuter_stats":       results["segments"]["commuter_stats"],
        "usage_patterns":       results["usage"],
        "top_stations":         results["station_analysis"],
    }
    paths = []
    for name, df in tables.items():
        path = os.path.join(output_dir, f"{name}.csv")
        df.to_csv(path, index=False)
        paths.append(path)
    return paths


def render_charts(results, output_dir=OUTPUT_DIR):
    rides = results["complete_rides"]
    return [
        (charts.create_hourly_pattern_plot(results["temporal"]["hourly"], output_dir), "Hourly ridership by rider type"),
        (charts.create_weekly_pattern_plot(results["temporal"]["weekly"], output_dir), "Weekly ridership by rider type"),
        (charts.create_seasonal_pattern_plot(results["temporal"]["seasonal"], output_dir), "Monthly ridership by rider type"),
        (charts.create_trip_duration_plot(rides, output_dir), "Trip duration distribution"),
        (charts.create_trip_distance_plot(rides, output_dir), "Trip distance distribution"),
        (charts.create_top_stations_plot(results["station_analysis"], output_dir), "Most popular start stations"),
        (charts.create_usage_patterns_plot(results["usage"], output_dir), "Usage patterns by rider type"),
    ]


def build_report(results, figures, output_dir=OUTPUT_DIR):
    tables = {
        "Station data completeness": ("Rides by station status", results["station_comparison"]),
        "Trip characteristics": ("Trip metrics by rider type", results["trips"]["metrics"]),
        "Commuters": ("Likely commuter rides by rider type", results["segments"]["commuter_stats"]),
        "Usage patterns": ("Share of rides per usage pattern", results["usage"]),
        "Top stations": ("Mean share of commute-hour rides at top stations", results["station_summary"]),
    }
    figures = [(os.path.relpath(path, output_dir), caption) for path, caption in figures]
    tex = build_report_tex(results["quality_report"], tables, figures)
    return write_report(tex, output_dir)


def main():
    print("📚 Loading trip files…")
    try:
        raw = load_trip_data(TRIP_ROOT)
    except (FileNotFoundError, ValueError) as e:
        print(f"❌  {e}")
        sys.exit(1)
    print(f"✅  Loaded {len(raw):,} rides")

    print("⚙️ Cleaning and segmenting rides…")
    results = run_pipeline(raw)
    report = results["quality_report"]
    print(f"   Kept {report['final_rows']:,} of {report['initial_rows']:,} rides "
          f"({report['pct_rows_kept']:.1f}%), removed {report['rows_removed']:,}")
    if report["duplicate_ride_ids"]:
        print(f"   ⚠️ {report['duplicate_ride_ids']:,} duplicate ride ids in the input")

    print("💾 Saving summary tables…")
    save_tables(results, OUTPUT_DIR)

    if results["complete_rides"].empty:
        print("⚠️ No rides with complete station data survived cleaning; "
              "skipping charts, maps and report")
        return

    print("📈 Creating charts…")
    figures = render_charts(results, OUTPUT_DIR)

    print("🗺️ Building station maps…")
    save_station_maps(results["complete_rides"], OUTPUT_DIR)

    print("📝 Writing report…")
    try:
        tex_path, pdf_path = build_report(results, figures, OUTPUT_DIR)
    except subprocess.CalledProcessError as e:
        print(f"LaTeX compilation failed with return code {e.returncode}.")
        sys.exit(e.returncode)
    if pdf_path is None:
        print(f"'pdflatex' not found; LaTeX source left at {tex_path}")
    else:
        print(f"✅ Report generated at {pdf_path}")


if __name__ == "__main__":
    main()
