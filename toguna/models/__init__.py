"""Database models."""

from toguna.models.client import Client, ClientStatus
from toguna.models.operator import Operator, OperatorRole, OperatorStatus
from toguna.models.project import Project, ProjectStatus, ProjectMember, MemberRole
from toguna.models.company import Company, CompanyRank, CompanyStatus
from toguna.models.call import CallLog, CallResult, CallRecording
from toguna.models.appointment import Appointment, AppointmentStatus, MeetingType
from toguna.models.schedule import DailySchedule
from toguna.models.nurturing import (
    DocumentTemplate,
    DocumentSend,
    DocumentTracking,
    EngagementScore,
    FollowupRule,
    FollowupExecution,
)
from toguna.models.quality import CallQualityScore, GoldenCall, PivotAlert
from toguna.models.incubation import RejectionInsight, RejectionCategory, CrossSellRecommendation
from toguna.models.fraud import OperatorFraudScore, FraudType, FraudStatus
from toguna.models.compliance import SubsidyReport, ComplianceDocument, AuditLog
from toguna.models.intelligence import CrawlJob, CrawlJobStatus, NewsTrigger
from toguna.models.training import RoleplaySession, RoleplayScenario
from toguna.models.notification import Notification, NotificationType, SalesFloorStatus
from toguna.models.portal import PortalToken
from toguna.models.risk import CompanyRiskFlag, RiskFlagType, RiskSeverity

__all__ = [
    "Client",
    "ClientStatus",
    "Operator",
    "OperatorRole",
    "OperatorStatus",
    "Project",
    "ProjectStatus",
    "ProjectMember",
    "MemberRole",
    "Company",
    "CompanyRank",
    "CompanyStatus",
    "CallLog",
    "CallResult",
    "CallRecording",
    "Appointment",
    "AppointmentStatus",
    "MeetingType",
    "DailySchedule",
    "DocumentTemplate",
    "DocumentSend",
    "DocumentTracking",
    "EngagementScore",
    "FollowupRule",
    "FollowupExecution",
    "CallQualityScore",
    "GoldenCall",
    "PivotAlert",
    "RejectionInsight",
    "RejectionCategory",
    "CrossSellRecommendation",
    "OperatorFraudScore",
    "FraudType",
    "FraudStatus",
    "SubsidyReport",
    "ComplianceDocument",
    "AuditLog",
    "CrawlJob",
    "CrawlJobStatus",
    "NewsTrigger",
    "RoleplaySession",
    "RoleplayScenario",
    "Notification",
    "NotificationType",
    "SalesFloorStatus",
    "PortalToken",
    "CompanyRiskFlag",
    "RiskFlagType",
    "RiskSeverity",
]
