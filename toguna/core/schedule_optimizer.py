"""Daily schedule optimizer and grid layout."""

from dataclasses import dataclass
from datetime import date
from typing import Protocol, Sequence

TIME_SLOTS = [f"{hour:02d}:00" for hour in range(9, 19)]

CLIENT_COLORS = [
    "blue",
    "green",
    "purple",
    "orange",
    "pink",
    "cyan",
]

MORNING_BLOCK = ("09:00", "12:00", 30)
AFTERNOON_BLOCK = ("13:00", "18:00", 50)


class _Named(Protocol):
    id: int
    name: str


@dataclass
class PlannedBlock:
    operator_id: int
    client_id: int
    schedule_date: date
    start_time: str
    end_time: str
    target_calls: int


def client_color(index: int) -> str:
    return CLIENT_COLORS[index % len(CLIENT_COLORS)]


def optimize(
    operators: Sequence[_Named],
    clients: Sequence[_Named],
    schedule_date: date,
) -> list[PlannedBlock]:
    """Assign operators to clients in two fixed windows.

    Operator i works client j in the morning when (i + j) is a multiple of 3
    and in the afternoon when it is even. Overlapping assignments are kept;
    the grid shows the first matching block per slot.
    """
    blocks: list[PlannedBlock] = []
    for i, operator in enumerate(operators):
        for j, client in enumerate(clients):
            if (i + j) % 3 == 0:
                start, end, target = MORNING_BLOCK
                blocks.append(PlannedBlock(operator.id, client.id, schedule_date, start, end, target))
            if (i + j) % 2 == 0:
                start, end, target = AFTERNOON_BLOCK
                blocks.append(PlannedBlock(operator.id, client.id, schedule_date, start, end, target))
    return blocks


def slot_in_block(slot: str, start_time: str, end_time: str) -> bool:
    """Zero-padded HH:MM strings order lexically, so plain comparison is enough."""
    return start_time <= slot < end_time


def build_grid(
    operators: Sequence[_Named],
    clients: Sequence[_Named],
    blocks: Sequence,
) -> tuple[list[dict], dict[int, str]]:
    """Lay blocks out as one row per operator with one cell per time slot."""
    colors = {client.id: client_color(index) for index, client in enumerate(clients)}
    names = {client.id: client.name for client in clients}

    by_operator: dict[int, list] = {}
    for block in blocks:
        by_operator.setdefault(block.operator_id, []).append(block)

    rows = []
    for operator in operators:
        cells = []
        own_blocks = by_operator.get(operator.id, [])
        for slot in TIME_SLOTS:
            cell = {"time": slot}
            for block in own_blocks:
                if slot_in_block(slot, block.start_time, block.end_time):
                    cell.update(
                        client_id=block.client_id,
                        client_name=names.get(block.client_id),
                        color=colors.get(block.client_id),
                        target_calls=block.target_calls,
                    )
                    break
            cells.append(cell)
        rows.append({
            "operator_id": operator.id,
            "operator_name": operator.name,
            "cells": cells,
        })
    return rows, colors
