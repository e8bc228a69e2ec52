from datetime import datetime
from io import BytesIO
from typing import Dict, List

import pandas as pd

EXPORT_COLUMNS = [
    "id",
    "username",
    "species",
    "size",
    "weight",
    "lake",
    "latitude",
    "longitude",
    "temperature",
    "depth",
    "lure",
    "catch_date",
    "is_verified",
]


def catches_to_dataframe(rows: List[Dict]) -> pd.DataFrame:
    df = pd.DataFrame(rows, columns=EXPORT_COLUMNS)
    if not df.empty:
        df["is_verified"] = df["is_verified"].fillna(0).astype(bool)
    return df


def export_catches_to_excel(df: pd.DataFrame, target=None):
    """Write the catch dataframe to an xlsx workbook with a summary row.

    ``target`` may be a file path or a binary buffer; a new ``BytesIO`` is
    created and returned when omitted.
    """
    if target is None:
        target = BytesIO()

    with pd.ExcelWriter(target, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name="Catches", index=False)

        worksheet = writer.sheets["Catches"]
        last_row = len(df) + 2
        worksheet[f"A{last_row}"] = "Summary"

        if "species" in df.columns:
            col_letter = chr(ord("A") + df.columns.get_loc("species"))
            worksheet[f"{col_letter}{last_row}"] = int(df["species"].nunique())

        if "size" in df.columns:
            col_letter = chr(ord("A") + df.columns.get_loc("size"))
            worksheet[f"{col_letter}{last_row}"] = float(df["size"].max()) if df["size"].notna().any() else None

        if "weight" in df.columns:
            col_letter = chr(ord("A") + df.columns.get_loc("weight"))
            worksheet[f"{col_letter}{last_row}"] = float(df["weight"].fillna(0).sum())

    return target


def export_filename() -> str:
    return f"catches_{datetime.now().strftime('%Y%m%d_%H%M%S')}.xlsx"
