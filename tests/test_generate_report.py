import os

import pandas as pd

import generate_report
from generate_report import (
    build_report_tex,
    format_value,
    latex_escape,
    quality_report_tex,
    write_report,
)


REPORT = {
    "initial_rows": 13,
    "final_rows": 5,
    "rows_removed": 8,
    "pct_rows_kept": 38.4615,
    "pct_missing_stations": 20.0,
    "avg_ride_length": 24.0,
    "median_ride_length": 20.0,
    "pct_valid_coordinates": 100.0,
    "pct_complete_station_data": float("nan"),
    "duplicate_ride_ids": 0,
}


def test_latex_escape():
    assert latex_escape("Clark St & Lake St") == r"Clark St \& Lake St"
    assert latex_escape("50%_done") == r"50\%\_done"
    assert latex_escape("a\\b") == r"a\textbackslash{}b"


def test_format_value():
    assert format_value(1234567) == "1,234,567"
    assert format_value(38.4615) == "38.46"
    assert format_value(float("nan")) == "--"
    assert format_value(True) == "Yes"
    assert format_value("Both Valid") == "Both Valid"


def test_quality_report_table_lists_every_metric():
    tex = quality_report_tex(REPORT)
    assert r"\label{tab:quality}" in tex
    assert r"Rows kept (\%) & 38.46 \\" in tex
    assert r"Both stations named (\%) & -- \\" in tex
    assert tex.count(r" \\") == len(REPORT) + 1


def test_build_report_tex_includes_tables_and_figures():
    usage = pd.DataFrame({"member_casual": ["member"], "usage_pattern": ["Commuter"],
                          "total_rides": [3], "percentage": [75.0]})
    tex = build_report_tex(REPORT, {"Usage patterns": ("Share of rides", usage)},
                           [("usage_patterns.png", "Usage patterns by rider type")])
    assert tex.lstrip().startswith(r"\documentclass")
    assert tex.rstrip().endswith(r"\end{document}")
    assert r"\subsection{Usage patterns}" in tex
    assert r"member & Commuter & 3 & 75.00 \\" in tex
    assert r"\includegraphics[width=0.9\textwidth]{usage_patterns.png}" in tex


def test_write_report_without_compiler(tmp_path, monkeypatch):
    monkeypatch.setattr(generate_report, "find_pdflatex", lambda: None)
    tex_path, pdf_path = write_report(build_report_tex(REPORT), str(tmp_path))
    assert pdf_path is None
    assert os.path.isfile(tex_path)
    with open(tex_path, encoding="utf-8") as f:
        assert r"\begin{document}" in f.read()
