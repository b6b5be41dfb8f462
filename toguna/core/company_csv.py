"""Company list CSV upload: parsing and the blank template."""

import csv
import io
import re

from toguna.core.reports import CSV_BOM

TEMPLATE_HEADER = ["企業名", "業種", "従業員数", "所在地", "電話番号", "URL"]
TEMPLATE_SAMPLE = ["株式会社サンプル", "IT", "100", "東京都渋谷区", "03-1234-5678", "https://example.com"]

# Accepted header names per field, first match wins
COLUMN_ALIASES = {
    "name": ("企業名", "company_name", "name"),
    "industry": ("業種", "industry"),
    "employees": ("従業員数", "employees"),
    "location": ("所在地", "location", "住所"),
    "phone": ("電話番号", "phone", "tel"),
    "website": ("URL", "website", "ホームページ"),
}

_LEADING_NUMBER = re.compile(r"^\s*(\d+)")


def template_csv() -> str:
    """Header plus one sample row, BOM-prefixed so Excel opens it as UTF-8."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(TEMPLATE_HEADER)
    writer.writerow(TEMPLATE_SAMPLE)
    return CSV_BOM + buffer.getvalue()


def decode_upload(raw: bytes) -> str:
    """Decode an uploaded file. Excel on Japanese Windows saves Shift_JIS (cp932)."""
    for encoding in ("utf-8-sig", "cp932"):
        try:
            return raw.decode(encoding)
        except UnicodeDecodeError:
            continue
    raise ValueError("CSV must be UTF-8 or Shift_JIS encoded")


def parse_employees(value: str | None) -> int | None:
    if not value:
        return None
    match = _LEADING_NUMBER.match(value.replace(",", ""))
    if not match:
        return None
    return int(match.group(1)) or None


def _pick(row: dict, field: str) -> str | None:
    for header in COLUMN_ALIASES[field]:
        value = (row.get(header) or "").strip()
        if value:
            return value
    return None


def parse_company_csv(text: str) -> list[dict]:
    """
    Read company rows keyed by model field.

    Rows without a company name are returned with `name` set to None so the
    caller can count them as skipped.
    """
    reader = csv.DictReader(io.StringIO(text.lstrip(CSV_BOM)))
    if not reader.fieldnames or not any(
        header.strip() in COLUMN_ALIASES["name"] for header in reader.fieldnames
    ):
        raise ValueError("CSV needs a company name column (企業名, company_name or name)")

    rows = []
    for raw in reader:
        row = {(key or "").strip(): value for key, value in raw.items()}
        rows.append({
            "name": _pick(row, "name"),
            "industry": _pick(row, "industry"),
            "employees": parse_employees(_pick(row, "employees")),
            "location": _pick(row, "location"),
            "phone": _pick(row, "phone"),
            "website": _pick(row, "website"),
        })
    return rows
