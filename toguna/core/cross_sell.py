"""Cross-sell recommendations for companies that rejected a project."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.models.call import CallLog, CallResult
from toguna.models.company import Company
from toguna.models.incubation import CrossSellRecommendation, CrossSellStatus
from toguna.models.project import Project, ProjectStatus

logger = logging.getLogger(__name__)

MIN_MATCH_SCORE = 60
MAX_REJECTED_CALLS = 50
MAJOR_CITIES = ("東京", "大阪")
DEFAULT_REASON = "別商材のターゲット属性に合致"


def score_match(company: Company | None, target: Project) -> tuple[int, list[str]]:
    """Score how well a rejected company fits another project."""
    score = 40
    reasons: list[str] = []

    if company is None:
        return score, [DEFAULT_REASON]

    if company.industry and target.description and company.industry in target.description:
        score += 25
        reasons.append("業界マッチ")
    if (company.employees or 0) >= 50:
        score += 10
        reasons.append("企業規模が適合")
    if company.location and any(city in company.location for city in MAJOR_CITIES):
        score += 10
        reasons.append("地域マッチ")
    score += 5

    return score, reasons or [DEFAULT_REASON]


class CrossSellEngine:
    """Generate and persist cross-sell recommendations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def generate(self, source_project_id: int) -> list[CrossSellRecommendation]:
        result = await self.db.execute(
            select(CallLog)
            .where(
                CallLog.project_id == source_project_id,
                CallLog.result.in_([CallResult.REJECTED, CallResult.NG]),
            )
            .order_by(CallLog.called_at)
            .limit(MAX_REJECTED_CALLS)
        )
        rejected_calls = result.scalars().all()
        if not rejected_calls:
            return []

        result = await self.db.execute(
            select(Project).where(
                Project.id != source_project_id,
                Project.status == ProjectStatus.ACTIVE,
            )
        )
        targets = result.scalars().all()
        if not targets:
            return []

        company_ids = {call.company_id for call in rejected_calls}
        result = await self.db.execute(select(Company).where(Company.id.in_(company_ids)))
        companies = {company.id: company for company in result.scalars().all()}

        recommendations = []
        for call in rejected_calls:
            company = companies.get(call.company_id)
            for target in targets:
                score, reasons = score_match(company, target)
                if score < MIN_MATCH_SCORE:
                    continue
                recommendation = CrossSellRecommendation(
                    company_id=call.company_id,
                    source_project_id=source_project_id,
                    target_project_id=target.id,
                    call_log_id=call.id,
                    match_score=score,
                    reasons=reasons,
                    rejection_category=call.result.value,
                    status=CrossSellStatus.SUGGESTED,
                )
                self.db.add(recommendation)
                recommendations.append(recommendation)

        if recommendations:
            await self.db.commit()
            logger.info(
                f"Generated {len(recommendations)} cross-sell recommendations from project {source_project_id}"
            )
        return recommendations
