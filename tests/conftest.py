import matplotlib
matplotlib.use("Agg")

import pandas as pd
import pytest

from trip_loader import TRIP_COLUMNS


BASE_TRIP = {
    "ride_id":            "R1",
    "rideable_type":      "classic_bike",
    "started_at":         "2024-01-05 08:00:00",   # Friday
    "ended_at":           "2024-01-05 08:15:00",
    "start_station_name": "Clark St & Lake St",
    "start_station_id":   "A",
    "end_station_name":   "State St & Madison St",
    "end_station_id":     "B",
    "start_lat":          41.88,
    "start_lng":          -87.63,
    "end_lat":            41.89,
    "end_lng":            -87.62,
    "member_casual":      "member",
}


def trip(**overrides):
    row = dict(BASE_TRIP)
    row.update(overrides)
    return row


def trips_frame(*rows):
    return pd.DataFrame(list(rows), columns=TRIP_COLUMNS)


@pytest.fixture
def make_trip():
    return trip


@pytest.fixture
def make_frame():
    return trips_frame


@pytest.fixture
def mixed_trips():
    """Valid rides for both rider types plus one of each kind of rejected row."""
    return trips_frame(
        trip(ride_id="ok-commute"),
        trip(ride_id="ok-round", start_lat=41.88, start_lng=-87.63, end_lat=41.88, end_lng=-87.63,
             end_station_id="A", end_station_name="Clark St & Lake St"),
        trip(ride_id="ok-weekend", started_at="2024-01-06 12:00:00", ended_at="2024-01-06 12:40:00",
             member_casual="casual"),
        trip(ride_id="ok-night", started_at="2024-07-10 23:00:00", ended_at="2024-07-10 23:20:00",
             member_casual="casual", end_station_name=None),
        trip(ride_id="ok-no-ids", started_at="2024-04-02 11:00:00", ended_at="2024-04-02 11:30:00",
             start_station_id=None, start_station_name=None),
        trip(ride_id="bad-reversed", started_at="2024-01-05 09:00:00", ended_at="2024-01-05 08:00:00"),
        trip(ride_id="bad-short", ended_at="2024-01-05 08:00:30"),
        trip(ride_id="bad-long", ended_at="2024-01-06 08:00:00"),
        trip(ride_id="bad-missing-end", ended_at=None),
        trip(ride_id="bad-outside", start_lat=40.71, start_lng=-74.0),
        trip(ride_id="bad-no-coords", end_lat=None, end_lng=None),
        trip(ride_id="bad-fast", start_lat=41.70, start_lng=-87.70, end_lat=41.82, end_lng=-87.70,
             ended_at="2024-01-05 08:10:00"),
        trip(ride_id="bad-far", start_lat=41.65, start_lng=-87.70, end_lat=41.85, end_lng=-87.70,
             ended_at="2024-01-05 10:00:00"),
    )
