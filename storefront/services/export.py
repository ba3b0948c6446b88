"""Spreadsheet export of the user directory (in-memory .xlsx via pandas/openpyxl)."""

from __future__ import annotations

import io

import pandas as pd

EXPORT_COLUMNS = ["ID", "Name", "Email", "Role", "Created At"]
SHEET_NAME = "Users"


def export_users(users: list[dict]) -> bytes:
    rows = [
        {
            "ID": u.get("id"),
            "Name": u.get("name"),
            "Email": u.get("email"),
            "Role": u.get("role"),
            "Created At": u.get("createdAt"),
        }
        for u in users
    ]
    df = pd.DataFrame(rows, columns=EXPORT_COLUMNS)

    # Build the workbook in memory, nothing touches disk
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=SHEET_NAME)
    return output.getvalue()
