import os
import numpy as np
import folium
from folium.plugins import HeatMap
import branca.colormap as cm

# Station maps built from the cleaned ride table

OUTPUT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), 'output'))
CHICAGO_CENTER = [41.8781, -87.6298]
TOP_N = 10


def create_colormap(vmin, vmax):
    return cm.LinearColormap(
        ["blue","green","yellow","red"],
        vmin=vmin, vmax=vmax, caption="Ride volume"
    )


def station_volume(data):
    """Rides per start station with its first seen coordinates, busiest first."""
    return (
        data.dropna(subset=["start_station_id"])
            .groupby("start_station_id")
            .agg(start_station_name=("start_station_name", "first"),
                 start_lat=("start_lat", "first"),
                 start_lng=("start_lng", "first"),
                 count=("ride_id", "count"))
            .sort_values(["count"], ascending=False, kind="mergesort")
    )


def build_density_map(station_stats):
    m = folium.Map(CHICAGO_CENTER, zoom_start=12)
    HeatMap(
        station_stats[["start_lat","start_lng","count"]].values.tolist(),
        radius=15, blur=25, max_zoom=18, min_opacity=0.4
    ).add_to(m)
    cmap = create_colormap(
        station_stats["count"].min(),
        station_stats["count"].max()
    )
    cmap.add_to(m)
    return m


def build_gradient_map(station_stats):
    cmap = create_colormap(
        station_stats["count"].min(),
        station_stats["count"].max()
    )
    m = folium.Map(CHICAGO_CENTER, zoom_start=12)
    for sid, r in station_stats.iterrows():
        color = cmap(r["count"])
        folium.Circle(
            [r["start_lat"], r["start_lng"]],
            radius=10 + np.log1p(r["count"])*5,
            color=color, fill=True, fill_color=color, fill_opacity=0.6,
            popup=f"{r['start_station_name']}<br>Total rides: {r['count']}"
        ).add_to(m)
    cmap.add_to(m)
    return m


def build_top_station_map(station_stats, top_n=TOP_N):
    m = folium.Map(CHICAGO_CENTER, zoom_start=12)
    for sid, r in station_stats.head(top_n).iterrows():
        folium.Marker(
            [r["start_lat"], r["start_lng"]],
            popup=f"<b>{r['start_station_name']}</b><br>Total rides: {r['count']}",
            icon=folium.Icon(color="blue", icon="bicycle", prefix="fa")
        ).add_to(m)
    return m


def save_station_maps(data, output_dir=OUTPUT_DIR, top_n=TOP_N):
    """Write the density, gradient and top-station maps; returns the saved paths."""
    os.makedirs(output_dir, exist_ok=True)
    station_stats = station_volume(data)
    if station_stats.empty:
        return []

    maps = {
        "station_density_heatmap.html": build_density_map(station_stats),
        "station_gradient_map.html":    build_gradient_map(station_stats),
        f"top{top_n}_stations_map.html": build_top_station_map(station_stats, top_n),
    }
    paths = []
    for fname, m in maps.items():
        path = os.path.join(output_dir, fname)
        m.save(path)
        paths.append(path)
    return paths
