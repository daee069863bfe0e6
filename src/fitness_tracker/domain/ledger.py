"""Read model for the daily activity ledger."""

from dataclasses import dataclass, field

from fitness_tracker.domain.entries import Entry, MacroTotals


@dataclass(frozen=True)
class LedgerSnapshot:
    """Derived state of one domain's plan set and logs for a day."""

    kind: str
    today: int
    loading: bool = True
    weight_kg: float | None = None
    planned: list[Entry] = field(default_factory=list)
    today_logs: list[Entry] = field(default_factory=list)
    week_logs: list[Entry] = field(default_factory=list)
    planned_totals: MacroTotals = field(default_factory=MacroTotals)
    today_totals: MacroTotals = field(default_factory=MacroTotals)
    week_totals: MacroTotals = field(default_factory=MacroTotals)
    calorie_target: float | None = None
    target_verdict: str | None = None
    error: str | None = None
