"""Rejection insight analytics.

Turns captured rejection reasons into tallies, product opportunities and the
deep-analysis view. Unmet needs are ranked by an opportunity score that
rewards needs heard across many projects:

    opportunity_score = frequency * ln(distinct_projects + 1)
"""

import math
from collections import Counter, defaultdict
from datetime import datetime, timedelta
from typing import Iterable, Protocol, Sequence

from toguna.models.incubation import RejectionCategory

KNOWN_CATEGORIES = [c.value for c in RejectionCategory]

TIME_RANGE_DAYS = {
    "month": 30,
    "quarter": 90,
    "year": 365,
}

CATEGORY_LABELS = {
    "price": "価格",
    "timing": "タイミング",
    "no_need": "ニーズなし",
    "competitor": "競合利用中",
    "authority": "決裁権なし",
    "budget": "予算なし",
    "satisfaction": "現状満足",
    "other": "その他",
}


class _Insight(Protocol):
    category: str
    pain_point: str | None
    unmet_need: str | None
    project_id: int | None
    created_at: datetime


def normalize_category(category: str | None) -> str:
    """Bucket unknown or empty labels into "other"."""
    if category in KNOWN_CATEGORIES:
        return category
    return RejectionCategory.OTHER.value


def opportunity_score(frequency: int, distinct_projects: int) -> float:
    return frequency * math.log(distinct_projects + 1)


def filter_by_time_range(insights: Iterable[_Insight], time_range: str, now: datetime) -> list:
    days = TIME_RANGE_DAYS.get(time_range)
    if days is None:
        return list(insights)
    cutoff = now - timedelta(days=days)
    return [i for i in insights if i.created_at >= cutoff]


def _unique_texts(values: Iterable[str | None]) -> list[str]:
    seen: dict[str, None] = {}
    for value in values:
        if value and value.strip():
            seen.setdefault(value.strip(), None)
    return list(seen)


def tally_categories(insights: Iterable[_Insight]) -> dict[str, int]:
    counts = {category: 0 for category in KNOWN_CATEGORIES}
    for insight in insights:
        counts[normalize_category(insight.category)] += 1
    return counts


def product_opportunities(insights: Sequence[_Insight]) -> list[dict]:
    """Derive product ideas once a rejection pattern is frequent enough."""
    by_category = tally_categories(insights)
    unmet_needs = _unique_texts(i.unmet_need for i in insights)
    opportunities = []

    if by_category["price"] > 5:
        opportunities.append({
            "kind": "pricing",
            "title": "低価格プランの検討",
            "description": f"価格を理由とした断りが{by_category['price']}件あります。エントリープランや分割払いを検討してください。",
            "evidence_count": by_category["price"],
            "examples": _unique_texts(i.pain_point for i in insights if normalize_category(i.category) == "price")[:3],
        })
    if by_category["no_need"] > 5:
        opportunities.append({
            "kind": "education",
            "title": "課題啓発コンテンツの作成",
            "description": f"ニーズなしの断りが{by_category['no_need']}件あります。課題に気づかせる資料が有効です。",
            "evidence_count": by_category["no_need"],
            "examples": _unique_texts(i.pain_point for i in insights if normalize_category(i.category) == "no_need")[:3],
        })
    if by_category["competitor"] > 3:
        opportunities.append({
            "kind": "differentiation",
            "title": "競合との差別化ポイント整理",
            "description": f"競合利用中の断りが{by_category['competitor']}件あります。乗り換えメリットを明確にしてください。",
            "evidence_count": by_category["competitor"],
            "examples": _unique_texts(i.detail for i in insights if normalize_category(i.category) == "competitor")[:3],
        })
    if len(unmet_needs) > 3:
        opportunities.append({
            "kind": "feature",
            "title": "新機能・新サービスの開発",
            "description": f"未充足ニーズが{len(unmet_needs)}種類見つかりました。",
            "evidence_count": len(unmet_needs),
            "examples": unmet_needs[:5],
        })
    return opportunities


def summarize(insights: Sequence[_Insight]) -> dict:
    return {
        "total_insights": len(insights),
        "by_category": tally_categories(insights),
        "pain_points": _unique_texts(i.pain_point for i in insights)[:10],
        "opportunities": product_opportunities(insights),
    }


def category_distribution(insights: Sequence[_Insight]) -> list[dict]:
    counts = tally_categories(insights)
    total = len(insights) or 1
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [
        {
            "category": category,
            "count": count,
            "percentage": round(count / total * 100, 1),
        }
        for category, count in ranked
        if count > 0
    ]


def pain_point_clusters(insights: Iterable[_Insight], limit: int = 10) -> list[dict]:
    counter = Counter(i.pain_point.strip() for i in insights if i.pain_point and i.pain_point.strip())
    return [{"pain_point": text, "count": count} for text, count in counter.most_common(limit)]


def unmet_need_opportunities(insights: Iterable[_Insight], limit: int = 10) -> list[dict]:
    """Rank unmet needs by frequency weighted by how many projects report them."""
    frequency: Counter = Counter()
    projects: dict[str, set] = defaultdict(set)
    for insight in insights:
        if not insight.unmet_need or not insight.unmet_need.strip():
            continue
        need = insight.unmet_need.strip()
        frequency[need] += 1
        if insight.project_id is not None:
            projects[need].add(insight.project_id)

    ranked = [
        {
            "need": need,
            "frequency": count,
            "uniqueness": len(projects[need]),
            "opportunity_score": round(opportunity_score(count, len(projects[need])), 4),
        }
        for need, count in frequency.items()
    ]
    ranked.sort(key=lambda item: item["opportunity_score"], reverse=True)
    return ranked[:limit]


def monthly_trend(insights: Iterable[_Insight], months: int = 12) -> list[dict]:
    buckets: dict[str, Counter] = defaultdict(Counter)
    for insight in insights:
        buckets[insight.created_at.strftime("%Y-%m")][normalize_category(insight.category)] += 1
    keys = sorted(buckets)[-months:]
    return [
        {
            "month": key,
            "total": sum(buckets[key].values()),
            "by_category": dict(buckets[key]),
        }
        for key in keys
    ]


def cross_project_matrix(
    insights: Iterable[_Insight],
    project_names: dict[int, str] | None = None,
) -> dict[str, dict[str, int]]:
    project_names = project_names or {}
    matrix: dict[str, dict[str, int]] = defaultdict(lambda: defaultdict(int))
    for insight in insights:
        if insight.project_id is None:
            key = "unassigned"
        else:
            key = project_names.get(insight.project_id, str(insight.project_id))
        matrix[key][normalize_category(insight.category)] += 1
    return {project: dict(row) for project, row in matrix.items()}


def deep_analysis(
    insights: Sequence[_Insight],
    time_range: str,
    now: datetime,
    project_names: dict[int, str] | None = None,
) -> dict:
    scoped = filter_by_time_range(insights, time_range, now)
    return {
        "time_range": time_range,
        "total_insights": len(scoped),
        "category_distribution": category_distribution(scoped),
        "pain_point_clusters": pain_point_clusters(scoped),
        "unmet_needs": unmet_need_opportunities(scoped),
        "monthly_trend": monthly_trend(scoped),
        "cross_project_matrix": cross_project_matrix(scoped, project_names),
    }


def render_report(analysis: dict) -> str:
    """Plain-text report of a deep analysis."""
    lines = [
        "断り理由分析レポート",
        f"期間: {analysis['time_range']}",
        f"分析件数: {analysis['total_insights']}件",
        "",
        "■ カテゴリ分布",
    ]
    for row in analysis["category_distribution"]:
        label = CATEGORY_LABELS.get(row["category"], row["category"])
        lines.append(f"  - {label}: {row['count']}件 ({row['percentage']}%)")

    lines += ["", "■ 主な課題"]
    for row in analysis["pain_point_clusters"][:5]:
        lines.append(f"  - {row['pain_point']} ({row['count']}件)")

    lines += ["", "■ 事業機会（未充足ニーズ）"]
    for row in analysis["unmet_needs"][:5]:
        lines.append(
            f"  - {row['need']}: 頻度{row['frequency']} / "
            f"プロジェクト数{row['uniqueness']} / スコア{row['opportunity_score']:.2f}"
        )
    if not analysis["unmet_needs"]:
        lines.append("  - 該当なし")
    return "\n".join(lines)
