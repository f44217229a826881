"""Tests for export.py: CSV, Excel and PDF production reports."""

import io
import warnings
from datetime import date

import pandas as pd

from farmops.export import (
    DISPLAY_HEADERS,
    EXPORT_COLUMNS,
    build_csv,
    build_excel,
    export_filename,
    productions_frame,
    render_productions_pdf,
)
from farmops.models import join_productions


def test_export_filename():
    assert export_filename("csv", today=date(2024, 6, 15)) == "productions_2024-06-15.csv"


def test_frame_flattens_land_name(productions, lands):
    df = productions_frame(join_productions(productions, lands))
    assert list(df.columns) == EXPORT_COLUMNS
    assert len(df) == 5
    assert df.iloc[0]["land_name"] == "North Field"
    # unharvested rows export blanks rather than NaN
    assert df.iloc[1]["harvest_date"] == ""


def test_frame_without_land(productions):
    df = productions_frame(productions)
    assert (df["land_name"] == "").all()


def test_csv(productions, lands):
    text = build_csv(join_productions(productions, lands)).decode("utf-8")
    lines = text.strip().splitlines()
    assert lines[0] == ",".join(EXPORT_COLUMNS)
    assert lines[1].startswith("Tomatoes,North Field,2024-03-01,200")
    assert len(lines) == 6


def test_excel_sheet_uses_display_headers(productions, lands):
    data = build_excel(join_productions(productions, lands))
    df = pd.read_excel(io.BytesIO(data), sheet_name="Productions", engine="openpyxl")
    assert list(df.columns) == [DISPLAY_HEADERS[c] for c in EXPORT_COLUMNS]
    assert df["Commodity"].tolist() == ["Tomatoes", "Red Chili", "Tomatoes", "Garlic", "Tomatoes"]


def test_pdf(productions, lands):
    data = render_productions_pdf(join_productions(productions, lands), generated_on=date(2024, 6, 15))
    assert data.startswith(b"%PDF")
    assert len(data) > 500


def test_pdf_with_no_productions():
    assert render_productions_pdf([]).startswith(b"%PDF")


def test_pdf_avoids_deprecated_line_breaks(productions, lands):
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        render_productions_pdf(join_productions(productions, lands), generated_on=date(2024, 6, 15))
    deprecations = [str(w.message) for w in caught if issubclass(w.category, DeprecationWarning)]
    assert not [m for m in deprecations if '"ln"' in m]
