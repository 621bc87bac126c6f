import os
import subprocess
import shutil
import math

# Assembles the case-study report as LaTeX and compiles it with pdflatex

OUTPUT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), 'output'))
TEX_NAME   = "divvy_ridership_report.tex"
PDF_NAME   = "divvy_ridership_report.pdf"

QUALITY_LABELS = {
    "initial_rows":              "Initial rows",
    "final_rows":                "Final rows",
    "rows_removed":              "Rows removed",
    "pct_rows_kept":             "Rows kept (\\%)",
    "pct_missing_stations":      "Missing start station (\\%)",
    "avg_ride_length":           "Mean ride length (min)",
    "median_ride_length":        "Median ride length (min)",
    "pct_valid_coordinates":     "Rides with distance (\\%)",
    "pct_complete_station_data": "Both stations named (\\%)",
    "duplicate_ride_ids":        "Duplicate ride ids",
}

PREAMBLE = r"""
\documentclass[12pt]{article}
\usepackage[utf8]{inputenc}
\usepackage[margin=1in]{geometry}
\usepackage{graphicx}
\usepackage{float}
\usepackage{caption}
\usepackage{booktabs}
\usepackage{hyperref}
\title{Cyclistic Bike-Share Case Study: How Members and Casual Riders Differ}
\author{Divvy Ridership Analysis}
\date{\today}

\begin{document}
\maketitle
"""

INTRODUCTION = r"""
\section{Introduction}
This report compares how annual members and casual riders use the Divvy
bike-share system in Chicago. Monthly trip histories were combined into a
single table, cleaned, enriched with temporal and geographic features, and
summarised by rider type.

\section{Data Cleaning}
Rides were kept only when both timestamps were present, the ride ended after
it started and lasted between 1 minute and 24 hours. All four coordinates had
to fall within the Chicago service area (latitude 41.6--42.1, longitude
$-87.9$ to $-87.5$). Great-circle distances were computed with the Haversine
formula, and rides faster than 35\,km/h or longer than 15\,km were removed as
implausible. Table~\ref{tab:quality} summarises the effect of these rules.
"""


def latex_escape(text):
    text = str(text)
    for char, repl in [("\\", r"\textbackslash{}"), ("&", r"\&"), ("%", r"\%"),
                       ("$", r"\$"), ("#", r"\#"), ("_", r"\_"), ("{", r"\{"),
                       ("}", r"\}"), ("~", r"\textasciitilde{}"), ("^", r"\^{}")]:
        text = text.replace(char, repl)
    # braces added by the backslash replacement must survive the brace escapes
    return text.replace(r"\textbackslash\{\}", r"\textbackslash{}")


def format_value(value):
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, int):
        return f"{value:,}"
    if isinstance(value, float):
        if math.isnan(value):
            return "--"
        if value.is_integer() and abs(value) >= 1000:
            return f"{value:,.0f}"
        return f"{value:,.2f}"
    return latex_escape(value)


def table_tex(rows, header, caption, label):
    """A booktabs table from a header list and row lists of already-formatted cells."""
    cols = "l" + "r" * (len(header) - 1)
    lines = [
        r"\begin{table}[H]",
        r"\centering",
        r"\small",
        rf"\begin{{tabular}}{{{cols}}}",
        r"\toprule",
        " & ".join(header) + r" \\",
        r"\midrule",
    ]
    lines += [" & ".join(row) + r" \\" for row in rows]
    lines += [
        r"\bottomrule",
        r"\end{tabular}",
        rf"\caption{{{caption}}}",
        rf"\label{{{label}}}",
        r"\end{table}",
    ]
    return "\n".join(lines)


def dataframe_tex(df, caption, label):
    header = [latex_escape(c).replace(r"\_", " ") for c in df.columns]
    rows = [
        [format_value(v.item() if hasattr(v, "item") else v) for v in record]
        for record in df.itertuples(index=False, name=None)
    ]
    return table_tex(rows, header, latex_escape(caption), label)


def quality_report_tex(quality_report):
    rows = [
        [QUALITY_LABELS.get(k, latex_escape(k)), format_value(v)]
        for k, v in quality_report.items()
    ]
    return table_tex(rows, ["Metric", "Value"], "Data quality after cleaning", "tab:quality")


def figure_tex(path, caption, label):
    return "\n".join([
        r"\begin{figure}[H]",
        r"\centering",
        rf"\includegraphics[width=0.9\textwidth]{{{path}}}",
        rf"\caption{{{latex_escape(caption)}}}",
        rf"\label{{{label}}}",
        r"\end{figure}",
    ])


def build_report_tex(quality_report, tables=None, figures=None):
    """Full LaTeX source for the report.

    ``tables`` maps a section title to ``(caption, DataFrame)``; ``figures`` is a
    list of ``(png_path, caption)``. Paths are written as given, so pass paths
    relative to the output directory when compiling there.
    """
    parts = [PREAMBLE, INTRODUCTION, quality_report_tex(quality_report)]

    if tables:
        parts.append(r"\section{Findings}")
        for i, (title, (caption, df)) in enumerate(tables.items()):
            parts.append(rf"\subsection{{{latex_escape(title)}}}")
            parts.append(dataframe_tex(df, caption, f"tab:findings{i}"))

    if figures:
        parts.append(r"\section{Figures}")
        for i, (path, caption) in enumerate(figures):
            parts.append(figure_tex(path.replace(os.sep, "/"), caption, f"fig:{i}"))

    parts.append(r"\end{document}")
    return "\n\n".join(parts) + "\n"


def find_pdflatex():
    pdflatex_cmd = shutil.which("pdflatex") or shutil.which("pdflatex.exe")
    if not pdflatex_cmd and os.name == 'nt':
        common_paths = [
            r"C:\\Program Files\\MiKTeX\\miktex\\bin\\x64\\pdflatex.exe",
            r"C:\\Program Files (x86)\\MiKTeX\\miktex\\bin\\x64\\pdflatex.exe",
            os.path.join(os.environ.get("LOCALAPPDATA", ""), "Programs", "MiKTeX", "miktex", "bin", "x64", "pdflatex.exe")
        ]
        for p in common_paths:
            if os.path.isfile(p):
                pdflatex_cmd = p
                break
    return pdflatex_cmd


def write_report(tex, output_dir=OUTPUT_DIR, compile_pdf=True):
    """Write the .tex file and, when pdflatex is available, compile it.

    Returns ``(tex_path, pdf_path)``; ``pdf_path`` is None if no compiler was
    found. A failed compilation raises subprocess.CalledProcessError.
    """
    os.makedirs(output_dir, exist_ok=True)
    tex_path = os.path.join(output_dir, TEX_NAME)
    with open(tex_path, "w", encoding="utf-8") as f:
        f.write(tex)

    pdflatex_cmd = find_pdflatex() if compile_pdf else None
    if not pdflatex_cmd:
        return tex_path, None

    subprocess.run(
        [pdflatex_cmd, "-interaction=nonstopmode", "-output-directory", output_dir, TEX_NAME],
        check=True, cwd=output_dir, stdout=subprocess.DEVNULL,
    )
    return tex_path, os.path.join(output_dir, PDF_NAME)
