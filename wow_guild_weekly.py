"""
Weekly raid kill reconciliation

External sources only report lifetime (per raid tier) kill counters. The
weekly view is derived by diffing the latest counters against a stored
baseline, which is rolled forward whenever a new reset window starts.
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence

from wow_guild_models import (
    BaselineSnapshot,
    BossKillCounter,
    Difficulty,
    ReconcileResult,
    WeeklyKillDetail,
)

logger = logging.getLogger('wow_guild_tracker')

# Highest difficulty first: only one detail is recorded per boss
DIFFICULTY_PRIORITY = (Difficulty.MYTHIC, Difficulty.HEROIC, Difficulty.NORMAL)

# Weekly raid boss kills needed for each Great Vault raid slot
RAID_VAULT_THRESHOLDS = (2, 4, 6)


def _index_by_name(counters: Iterable[BossKillCounter]) -> Dict[str, BossKillCounter]:
    return {counter.name: counter for counter in counters}


def _detect_weekly_kill(current: BossKillCounter, reference: Optional[BossKillCounter]) -> Optional[WeeklyKillDetail]:
    """Highest difficulty whose count strictly grew since the reference, if any."""
    if reference is None:
        reference = BossKillCounter(current.name)
    for difficulty in DIFFICULTY_PRIORITY:
        if current.kills_at(difficulty) > reference.kills_at(difficulty):
            return WeeklyKillDetail.for_difficulty(current.name, difficulty)
    return None


def _weekly_details(current_counters: Sequence[BossKillCounter],
                    reference_counters: Sequence[BossKillCounter]) -> List[WeeklyKillDetail]:
    reference = _index_by_name(reference_counters)
    details = []
    for counter in current_counters:
        detail = _detect_weekly_kill(counter, reference.get(counter.name))
        if detail is not None:
            details.append(detail)
    # sorted() is stable, so bosses keep their input order within a difficulty
    return sorted(details, key=lambda d: d.difficulty_id, reverse=True)


def reconcile(current_counters: Sequence[BossKillCounter],
              baseline: Optional[BaselineSnapshot],
              current_reset_date: str) -> ReconcileResult:
    """Work out which bosses were killed since the last weekly reset.

    Args:
        current_counters: Latest lifetime counters for the character.
        baseline: Stored baseline, or None if the character was never seen.
        current_reset_date: Date stamp of the reset window we are in
            (see wow_guild_reset.get_reset_date_stamp).

    Returns:
        ReconcileResult with the kill count, the details sorted mythic
        first, and the baseline the caller must persist for the next call.
    """
    current = tuple(current_counters)

    if baseline is None:
        # Nothing to diff against: existing kills are old progress
        logger.debug(f"No baseline yet, seeding one for reset {current_reset_date}")
        return ReconcileResult(
            count=0,
            details=(),
            new_baseline=BaselineSnapshot(
                reset_date=current_reset_date,
                boss_kills=current,
                latest_kills=current,
            ),
        )

    if baseline.reset_date == current_reset_date:
        reference = baseline.boss_kills
        new_baseline = BaselineSnapshot(
            reset_date=baseline.reset_date,
            boss_kills=baseline.boss_kills,
            latest_kills=current,
        )
    else:
        # New week: what was last seen becomes this week's starting point
        if baseline.latest_kills is not None:
            reference = baseline.latest_kills
        else:
            logger.warning(f"Baseline for reset {baseline.reset_date} has no latest kills, "
                           "falling back to its start-of-week snapshot")
            reference = baseline.boss_kills
        logger.debug(f"Rolling baseline over from {baseline.reset_date} to {current_reset_date}")
        new_baseline = BaselineSnapshot(
            reset_date=current_reset_date,
            boss_kills=tuple(reference),
            latest_kills=current,
        )

    details = tuple(_weekly_details(current, reference))
    return ReconcileResult(count=len(details), details=details, new_baseline=new_baseline)


def pick_more_complete(primary: Sequence[WeeklyKillDetail],
                       secondary: Sequence[WeeklyKillDetail]) -> List[WeeklyKillDetail]:
    """Choose between two independently sourced weekly kill lists.

    The longer list wins and ties go to `primary`. The two sources are not
    merged, so when they disagree on which bosses died the difficulty labels
    come wholly from one side.
    """
    if len(secondary) > len(primary):
        return list(secondary)
    return list(primary)


def merge_boss_kills(*sources: Iterable[BossKillCounter]) -> List[BossKillCounter]:
    """Combine counter lists from several sources, keeping the max per difficulty.

    Library helper for callers that read lifetime counters from more than one
    provider; the sync pass has a single counter source and does not use it.
    """
    merged: Dict[str, BossKillCounter] = {}
    for source in sources:
        for counter in source or []:
            existing = merged.get(counter.name)
            if existing is None:
                merged[counter.name] = counter
                continue
            merged[counter.name] = BossKillCounter(
                name=counter.name,
                normal=max(existing.normal, counter.normal),
                heroic=max(existing.heroic, counter.heroic),
                mythic=max(existing.mythic, counter.mythic),
            )
    return list(merged.values())


def raid_vault_slots(kill_count: int) -> int:
    """Number of Great Vault raid slots unlocked by this many weekly boss kills."""
    return sum(1 for threshold in RAID_VAULT_THRESHOLDS if kill_count >= threshold)
