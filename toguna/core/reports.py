"""CSV exports and printable subsidy reports."""

import csv
import html
import io
from collections.abc import Iterable, Sequence

from toguna.models.call import CallLog, CallResult
from toguna.models.company import Company
from toguna.models.compliance import SubsidyReport

CSV_BOM = "\ufeff"

RESULT_LABELS = {
    CallResult.APPOINTMENT: "アポ獲得",
    CallResult.DOCUMENT_SENT: "資料送付",
    CallResult.CALLBACK: "再架電",
    CallResult.ABSENT: "不在",
    CallResult.REJECTED: "断り",
    CallResult.NG: "NG",
}

REPORT_TYPE_LABELS = {
    "performance": "実績報告",
    "effect": "効果報告",
    "productivity": "生産性向上報告",
    "wage_increase": "賃金引上げ報告",
}


def to_csv(headers: Sequence[str], rows: Iterable[Sequence]) -> str:
    """UTF-8 CSV with a BOM so spreadsheet apps detect the encoding."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow(["" if value is None else value for value in row])
    return CSV_BOM + buffer.getvalue()


def _rate(part: int, total: int, digits: int = 2) -> float:
    return round(part / total * 100, digits) if total else 0.0


def summarize_calls(calls: Iterable[CallLog]) -> dict[int, dict]:
    """Per-operator call, connection and appointment counts."""
    per_operator: dict[int, dict] = {}
    for call in calls:
        row = per_operator.setdefault(
            call.operator_id,
            {"calls": 0, "connections": 0, "appointments": 0, "duration": 0},
        )
        row["calls"] += 1
        row["duration"] += call.duration or 0
        if call.result != CallResult.ABSENT:
            row["connections"] += 1
        if call.result == CallResult.APPOINTMENT:
            row["appointments"] += 1
    return per_operator


def call_logs_csv(
    calls: Sequence[CallLog],
    company_names: dict[int, str],
    operator_names: dict[int, str],
) -> str:
    headers = ["日時", "企業名", "オペレーター", "結果", "通話時間(秒)", "メモ"]
    rows = (
        [
            call.called_at.strftime("%Y-%m-%d %H:%M:%S"),
            company_names.get(call.company_id, ""),
            operator_names.get(call.operator_id, ""),
            RESULT_LABELS.get(call.result, call.result.value),
            call.duration or 0,
            call.notes,
        ]
        for call in calls
    )
    return to_csv(headers, rows)


def daily_report_csv(day: str, calls: Sequence[CallLog], operator_names: dict[int, str]) -> str:
    headers = ["日付", "オペレーター", "架電数", "接続数", "アポ獲得数", "接続率(%)", "アポ率(%)"]
    rows = []
    for operator_id, stats in sorted(summarize_calls(calls).items()):
        rows.append([
            day,
            operator_names.get(operator_id, ""),
            stats["calls"],
            stats["connections"],
            stats["appointments"],
            _rate(stats["connections"], stats["calls"], 1),
            _rate(stats["appointments"], stats["calls"]),
        ])
    return to_csv(headers, rows)


def operator_report_csv(calls: Sequence[CallLog], operator_names: dict[int, str]) -> str:
    headers = ["オペレーター名", "架電数", "接続数", "アポ獲得数", "接続率(%)", "アポ率(%)", "平均通話時間(秒)"]
    rows = []
    for operator_id, stats in sorted(summarize_calls(calls).items()):
        rows.append([
            operator_names.get(operator_id, ""),
            stats["calls"],
            stats["connections"],
            stats["appointments"],
            _rate(stats["connections"], stats["calls"], 1),
            _rate(stats["appointments"], stats["calls"]),
            round(stats["duration"] / stats["calls"]) if stats["calls"] else 0,
        ])
    return to_csv(headers, rows)


def companies_csv(companies: Sequence[Company]) -> str:
    headers = ["企業名", "電話番号", "業種", "従業員数", "所在地", "ランク", "ステータス"]
    rows = (
        [
            company.name,
            company.phone,
            company.industry,
            company.employees,
            company.location,
            company.rank.value,
            company.status.value,
        ]
        for company in companies
    )
    return to_csv(headers, rows)


def subsidy_report_html(report: SubsidyReport) -> str:
    """Standalone HTML page for printing or attaching to an application."""
    metrics = report.metrics or {}
    productivity = report.productivity_data or {}
    title = report.title or REPORT_TYPE_LABELS.get(report.report_type.value, "補助金レポート")

    metric_rows = [
        ("総架電数", metrics.get("total_calls", 0)),
        ("アポ獲得数", metrics.get("appointments", 0)),
        ("アポ率", f"{metrics.get('appointment_rate', 0)}%"),
        ("対象期間", metrics.get("period", "")),
    ]
    metric_html = "".join(
        f"<tr><td>{html.escape(label)}</td><td>{html.escape(str(value))}</td></tr>"
        for label, value in metric_rows
    )
    operator_html = "".join(
        "<tr>"
        f"<td>{html.escape(str(row.get('operator_name') or row.get('operator_id')))}</td>"
        f"<td>{row.get('calls', 0)}</td>"
        f"<td>{row.get('appointments', 0)}</td>"
        f"<td>{row.get('calls_per_day', 0)}</td>"
        f"<td>{row.get('talk_hours', 0)}</td>"
        "</tr>"
        for row in productivity.get("operators", [])
    )
    generated = report.generated_at.strftime("%Y/%m/%d %H:%M") if report.generated_at else "未生成"

    return f"""<!DOCTYPE html>
<html lang="ja">
<head>
<meta charset="utf-8" />
<title>{html.escape(title)}</title>
<style>
body {{ font-family: "Hiragino Sans", "Noto Sans JP", sans-serif; margin: 40px; color: #222; }}
h1 {{ border-bottom: 2px solid #0066cc; padding-bottom: 8px; }}
table {{ border-collapse: collapse; width: 100%; margin-bottom: 24px; }}
th, td {{ border: 1px solid #ccc; padding: 6px 10px; text-align: left; }}
th {{ background: #f0f4fa; }}
.meta {{ color: #666; font-size: 12px; }}
</style>
</head>
<body>
<h1>補助金レポート</h1>
<h2>{html.escape(title)}</h2>
<p class="meta">対象期間: {report.period_start.isoformat()} 〜 {report.period_end.isoformat()} / 作成日時: {generated} / ステータス: {report.status.value}</p>
<h2 class="section-title">指標サマリー</h2>
<table>
<thead><tr><th>指標</th><th>値</th></tr></thead>
<tbody>{metric_html}</tbody>
</table>
<h2 class="section-title">オペレーター別生産性</h2>
<table>
<thead><tr><th>オペレーター</th><th>架電数</th><th>アポ獲得数</th><th>1日あたり架電数</th><th>通話時間(h)</th></tr></thead>
<tbody>{operator_html}</tbody>
</table>
<p class="meta">稼働日数: {productivity.get("period_days", 0)} / オペレーター数: {productivity.get("operator_count", 0)} / 1人あたり架電数: {productivity.get("calls_per_operator", 0)}</p>
</body>
</html>
"""
