import os
import sys
import pandas as pd

from trip_loader import TRIP_ROOT, load_trip_data

# Builds a small stratified sample of the trip data that can be committed to the repo

SAMPLE_SIZE  = 1000
RANDOM_STATE = 123
SAMPLE_DIR   = os.path.abspath(os.path.join(os.path.dirname(__file__), 'data', 'sample'))


def create_sample_dataset(data, sample_size=SAMPLE_SIZE, random_state=RANDOM_STATE):
    """Proportional sample from every (month, rider type) group, sorted by start time."""
    if data.empty:
        return data.copy()
    frac = min(1.0, sample_size / len(data))
    month_year = data["started_at"].dt.to_period("M")
    sample = (
        data.groupby([month_year, data["member_casual"]], observed=True)
            .sample(frac=frac, random_state=random_state)
            .sort_values("started_at", kind="mergesort")
            .reset_index(drop=True)
    )
    return sample


def summarize_sample(original, sample):
    def _stats(df):
        return {
            "n_rides":    len(df),
            "pct_member": (df["member_casual"] == "member").mean() * 100 if len(df) else float("nan"),
            "n_months":   df["started_at"].dt.to_period("M").nunique(),
        }
    return pd.DataFrame({
        "Original Data": _stats(original),
        "Sample Data":   _stats(sample),
    }).T


def main():
    print("📚 Loading trip files…")
    try:
        trips = load_trip_data(TRIP_ROOT)
    except (FileNotFoundError, ValueError) as e:
        print(f"❌  {e}")
        sys.exit(1)

    sample = create_sample_dataset(trips)
    os.makedirs(SAMPLE_DIR, exist_ok=True)
    out_path = os.path.join(SAMPLE_DIR, "sample_divvy_tripdata.csv")
    sample.to_csv(out_path, index=False)
    print(summarize_sample(trips, sample))
    print(f"✅ Sample of {len(sample)} rides saved to {out_path}")


if __name__ == "__main__":
    main()
