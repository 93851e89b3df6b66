"""Pydantic schemas for sb_round API."""

from pydantic import BaseModel

from src.sb_common.money import format_multiplier
from src.sb_round.domain.models import HistoryEntry, HistoryStats, RoundSnapshot


class SnapshotResponse(BaseModel):
    round_id: int
    state: str
    current_multiplier: float
    current_multiplier_display: str
    countdown_remaining: float
    last_crash_point: float | None

    @classmethod
    def from_snapshot(cls, snapshot: RoundSnapshot) -> "SnapshotResponse":
        return cls(
            round_id=snapshot.round_id,
            state=snapshot.state.value,
            current_multiplier=round(snapshot.current_multiplier, 4),
            current_multiplier_display=format_multiplier(snapshot.current_multiplier),
            countdown_remaining=round(snapshot.countdown_remaining, 2),
            last_crash_point=(
                round(snapshot.last_crash_point, 4)
                if snapshot.last_crash_point is not None
                else None
            ),
        )


class HistoryItem(BaseModel):
    crash_point: float
    crash_point_display: str
    timestamp: str  # ISO8601 string


class HistoryStatsItem(BaseModel):
    count: int
    average: float | None
    highest: float | None
    lowest: float | None


class HistoryResponse(BaseModel):
    items: list[HistoryItem]  # most recent first
    stats: HistoryStatsItem

    @classmethod
    def from_history(
        cls, entries: tuple[HistoryEntry, ...], stats: HistoryStats
    ) -> "HistoryResponse":
        return cls(
            items=[
                HistoryItem(
                    crash_point=round(e.crash_point, 4),
                    crash_point_display=format_multiplier(e.crash_point),
                    timestamp=e.timestamp.isoformat(),
                )
                for e in entries
            ],
            stats=HistoryStatsItem(
                count=stats.count,
                average=round(stats.average, 4) if stats.average is not None else None,
                highest=stats.highest,
                lowest=stats.lowest,
            ),
        )
