"""Schedule grid schemas."""

from datetime import date

from pydantic import BaseModel


class ScheduleBlock(BaseModel):
    """A calling block of one operator for one client."""

    id: int | None = None
    operator_id: int
    client_id: int
    schedule_date: date
    start_time: str
    end_time: str
    target_calls: int

    class Config:
        from_attributes = True


class ScheduleCell(BaseModel):
    time: str
    client_id: int | None = None
    client_name: str | None = None
    color: str | None = None
    target_calls: int | None = None


class ScheduleRow(BaseModel):
    operator_id: int
    operator_name: str
    cells: list[ScheduleCell]


class ScheduleGridResponse(BaseModel):
    """Operators by hourly slots."""

    schedule_date: date
    time_slots: list[str]
    rows: list[ScheduleRow]
    client_colors: dict[int, str]
    is_saved: bool


class OptimizeResponse(BaseModel):
    schedule_date: date
    blocks: list[ScheduleBlock]
