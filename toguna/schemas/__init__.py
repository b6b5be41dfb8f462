"""Pydantic schemas for API validation."""

from toguna.schemas.operator import (
    OperatorCreate,
    OperatorUpdate,
    OperatorResponse,
    TokenResponse,
)
from toguna.schemas.client import ClientCreate, ClientUpdate, ClientResponse
from toguna.schemas.project import ProjectCreate, ProjectUpdate, ProjectResponse, ProjectStats
from toguna.schemas.company import CompanyCreate, CompanyUpdate, CompanyResponse
from toguna.schemas.call import CallLogCreate, CallLogResponse
from toguna.schemas.appointment import (
    AppointmentCreate,
    AppointmentUpdate,
    AppointmentResponse,
    AppointmentBoardResponse,
)
from toguna.schemas.schedule import ScheduleGridResponse
from toguna.schemas.incubation import DeepAnalysis, IncubationSummary
from toguna.schemas.sentiment import SentimentDashboard
from toguna.schemas.quality import QualityDashboard
from toguna.schemas.dashboard import DashboardSummary

__all__ = [
    "OperatorCreate",
    "OperatorUpdate",
    "OperatorResponse",
    "TokenResponse",
    "ClientCreate",
    "ClientUpdate",
    "ClientResponse",
    "ProjectCreate",
    "ProjectUpdate",
    "ProjectResponse",
    "ProjectStats",
    "CompanyCreate",
    "CompanyUpdate",
    "CompanyResponse",
    "CallLogCreate",
    "CallLogResponse",
    "AppointmentCreate",
    "AppointmentUpdate",
    "AppointmentResponse",
    "AppointmentBoardResponse",
    "ScheduleGridResponse",
    "DeepAnalysis",
    "IncubationSummary",
    "SentimentDashboard",
    "QualityDashboard",
    "DashboardSummary",
]
