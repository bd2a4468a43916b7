from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from tabook.models.booking import MAX_GROUPS
from tabook.utils.capacity import BookingSummary

# Сколько разных программ студент может вести одновременно
MAX_PROGRAMS = 2
# Потолок групп по всем программам, после которого студент скрывается из поиска
MAX_TOTAL_GROUPS = MAX_PROGRAMS * MAX_GROUPS


@dataclass
class ProgramAvailability:
    program: str
    eligible: bool
    remaining_groups: int
    group_options: List[int] = field(default_factory=list)
    alternatives: List[str] = field(default_factory=list)


def is_listed(summary: Optional[BookingSummary]) -> bool:
    """
    Показывать ли студента в общем поиске преподавателя.
    Без активных бронирований всегда показывается.
    """
    if summary is None or summary.program_count == 0:
        return True
    return summary.program_count <= MAX_PROGRAMS and summary.total_groups < MAX_TOTAL_GROUPS


def program_availability(summary: Optional[BookingSummary], program: str) -> ProgramAvailability:
    """
    Сколько групп можно предложить в форме бронирования для конкретной программы.

    Если у студента уже две разные программы и запрошенной среди них нет,
    бронировать её нельзя; в alternatives попадают программы, где ещё есть место.
    """
    if summary is None or summary.program_count == 0:
        return ProgramAvailability(program, True, MAX_GROUPS, list(range(1, MAX_GROUPS + 1)))

    booked = {p.program: p.groups for p in summary.program_details}

    if len(booked) >= MAX_PROGRAMS and program not in booked:
        alternatives = [name for name, groups in booked.items() if groups < MAX_GROUPS]
        return ProgramAvailability(program, False, 0, [], alternatives)

    remaining = max(MAX_GROUPS - booked.get(program, 0), 0)
    return ProgramAvailability(program, remaining > 0, remaining, list(range(1, remaining + 1)))
