from __future__ import annotations

import csv
import io


def read_csv_rows(text: str) -> list[list[str]]:
    """Parse CSV text into rows, tolerating a UTF-8 BOM and blank lines."""

    if text.startswith("\ufeff"):
        text = text[1:]
    reader = csv.reader(io.StringIO(text))
    return [row for row in reader if any(cell.strip() for cell in row)]
