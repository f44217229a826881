# farmops/export.py
from datetime import date
from typing import Any, Dict, List, Sequence
import io

import pandas as pd
from fpdf import FPDF
from fpdf.enums import XPos, YPos

from .models import Production
from .windows import parse_date

EXPORT_COLUMNS = [
    "commodity",
    "land_name",
    "planting_date",
    "seed_count",
    "estimated_harvest_date",
    "harvest_date",
    "harvest_yield_kg",
    "status",
]

DISPLAY_HEADERS = {
    "commodity": "Commodity",
    "land_name": "Land Name",
    "planting_date": "Planting Date",
    "seed_count": "Seed Count",
    "estimated_harvest_date": "Est. Harvest Date",
    "harvest_date": "Harvest Date",
    "harvest_yield_kg": "Yield (kg)",
    "status": "Status",
}

# Width (mm) of each PDF table column
PDF_COLUMNS = [
    ("Commodity", 32),
    ("Land", 38),
    ("Planted", 20),
    ("Seeds", 18),
    ("Harvested", 22),
    ("Yield", 26),
    ("Status", 26),
]


def export_filename(extension: str, today: date | None = None) -> str:
    today = today or date.today()
    return f"productions_{today.strftime('%Y-%m-%d')}.{extension}"


def productions_frame(productions: Sequence[Production]) -> pd.DataFrame:
    """One row per production with the land name flattened in."""
    rows: List[Dict[str, Any]] = []
    for p in productions:
        rows.append(
            {
                "commodity": p.commodity,
                "land_name": p.land.name if p.land else "",
                "planting_date": p.planting_date,
                "seed_count": p.seed_count,
                "estimated_harvest_date": p.estimated_harvest_date or "",
                "harvest_date": p.harvest_date or "",
                "harvest_yield_kg": p.harvest_yield_kg or "",
                "status": p.status,
            }
        )
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


def build_csv(productions: Sequence[Production]) -> bytes:
    return productions_frame(productions).to_csv(index=False).encode("utf-8")


def build_excel(productions: Sequence[Production]) -> bytes:
    """Create an Excel workbook with a 'Productions' sheet and return as bytes."""
    buffer = io.BytesIO()
    df = productions_frame(productions).rename(columns=DISPLAY_HEADERS)

    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name="Productions", index=False)

    buffer.seek(0)
    return buffer.getvalue()


def _short_date(value: str | None) -> str:
    parsed = parse_date(value)
    if parsed is None:
        return value or "-"
    return parsed.strftime("%m/%d/%y")


def _latin1(text: Any) -> str:
    # Core PDF fonts only cover latin-1
    return str(text).encode("latin-1", "replace").decode("latin-1")


def render_productions_pdf(productions: Sequence[Production], generated_on: date | None = None) -> bytes:
    """Production report: one table row per production, then a short summary."""
    generated_on = generated_on or date.today()

    pdf = FPDF()
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()

    # Title
    pdf.set_font("Helvetica", "B", 18)
    pdf.cell(0, 10, "Production Report", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_font("Helvetica", "", 10)
    pdf.cell(0, 6, f"Generated on {generated_on.strftime('%B %d, %Y')}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(6)

    # Table header
    pdf.set_font("Helvetica", "B", 8)
    pdf.set_fill_color(105, 185, 83)
    pdf.set_text_color(255, 255, 255)
    for title, width in PDF_COLUMNS:
        pdf.cell(width, 7, title, border=1, fill=True)
    pdf.ln()

    pdf.set_font("Helvetica", "", 8)
    pdf.set_text_color(0, 0, 0)
    for p in productions:
        values = [
            _latin1(p.commodity)[:20],
            _latin1(p.land.name if p.land else "-")[:24],
            _short_date(p.planting_date),
            str(p.seed_count),
            _short_date(p.harvest_date) if p.harvest_date else "-",
            f"{p.harvest_yield_kg:g} kg" if p.harvest_yield_kg else "-",
            p.status,
        ]
        for (_, width), value in zip(PDF_COLUMNS, values):
            pdf.cell(width, 6, value, border=1)
        pdf.ln()

    # Summary
    total_yield = sum(p.harvest_yield_kg or 0.0 for p in productions)
    harvested_count = sum(1 for p in productions if p.status == "harvested")

    pdf.ln(8)
    pdf.set_font("Helvetica", "B", 12)
    pdf.cell(0, 8, "Summary", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_font("Helvetica", "", 10)
    pdf.cell(0, 6, f"Total Productions: {len(productions)}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.cell(0, 6, f"Harvested: {harvested_count}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.cell(0, 6, f"Total Yield: {total_yield:,.1f} kg", new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    return bytes(pdf.output())
