"""
Mythic+ weekly activity

Buckets recent dungeon runs into reset weeks for trend display and works out
the Great Vault dungeon row for the current week.
"""

from datetime import datetime
from typing import Iterable, List, Sequence

from wow_guild_models import MPlusRunRecord, VaultSlot
from wow_guild_reset import ONE_WEEK, to_utc

HISTORY_WEEKS = 4
MIN_KEYSTONE_LEVEL = 10

# Runs this week needed for each Great Vault dungeon slot
DUNGEON_VAULT_THRESHOLDS = (1, 4, 8)


def bucket_weekly_history(runs: Iterable[MPlusRunRecord], reset_time: datetime,
                          min_level: int = MIN_KEYSTONE_LEVEL) -> List[int]:
    """Count runs per reset week: [this week, 1 week ago, 2 weeks ago, 3 weeks ago].

    Bucket i covers [reset - i weeks, reset - (i-1) weeks). Runs below
    `min_level` or outside all four windows are not counted.
    """
    reset_time = to_utc(reset_time)
    history = [0] * HISTORY_WEEKS
    for run in runs:
        if run.mythic_level < min_level:
            continue
        completed = to_utc(run.completed_at)
        for weeks_ago in range(HISTORY_WEEKS):
            window_start = reset_time - weeks_ago * ONE_WEEK
            if window_start <= completed < window_start + ONE_WEEK:
                history[weeks_ago] += 1
                break
    return history


def runs_since_reset(runs: Iterable[MPlusRunRecord], reset_time: datetime) -> List[MPlusRunRecord]:
    reset_time = to_utc(reset_time)
    return [run for run in runs if to_utc(run.completed_at) >= reset_time]


def count_weekly_runs(runs: Iterable[MPlusRunRecord], reset_time: datetime,
                      min_level: int = MIN_KEYSTONE_LEVEL) -> int:
    """Runs at or above `min_level` completed since the reset."""
    return sum(1 for run in runs_since_reset(runs, reset_time) if run.mythic_level >= min_level)


def dungeon_vault_slots(runs: Sequence[MPlusRunRecord], reset_time: datetime) -> List[VaultSlot]:
    """Great Vault dungeon row.

    Slot n unlocks once enough runs are done this week and is rewarded at
    the keystone level of the 1st/4th/8th highest run.
    """
    levels = sorted((run.mythic_level for run in runs_since_reset(runs, reset_time)), reverse=True)
    slots = []
    for threshold in DUNGEON_VAULT_THRESHOLDS:
        if len(levels) >= threshold:
            slots.append(VaultSlot(unlocked=True, key_level=levels[threshold - 1]))
        else:
            slots.append(VaultSlot())
    return slots
