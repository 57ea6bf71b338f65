"""Tests for weekly raid kill reconciliation."""

import pytest

from wow_guild_models import BaselineSnapshot, BossKillCounter, WeeklyKillDetail
from wow_guild_weekly import merge_boss_kills, pick_more_complete, raid_vault_slots, reconcile

WEEK_1 = "2024-06-05"
WEEK_2 = "2024-06-12"


def boss(name, normal=0, heroic=0, mythic=0):
    return BossKillCounter(name=name, normal=normal, heroic=heroic, mythic=mythic)


def detail(name, difficulty, difficulty_id):
    return WeeklyKillDetail(boss_name=name, difficulty=difficulty, difficulty_id=difficulty_id)


class TestFirstRun:
    def test_existing_kills_are_not_counted(self):
        current = [boss("Boss A", normal=5, heroic=3, mythic=1), boss("Boss B", normal=2)]

        result = reconcile(current, None, WEEK_1)

        assert result.count == 0
        assert result.details == ()

    def test_seeds_baseline_from_current_counters(self):
        current = [boss("Boss A", normal=5)]

        result = reconcile(current, None, WEEK_1)

        assert result.new_baseline == BaselineSnapshot(
            reset_date=WEEK_1,
            boss_kills=(boss("Boss A", normal=5),),
            latest_kills=(boss("Boss A", normal=5),),
        )

    def test_empty_counters(self):
        result = reconcile([], None, WEEK_1)

        assert result.count == 0
        assert result.new_baseline.boss_kills == ()
        assert result.new_baseline.latest_kills == ()


class TestSameResetWindow:
    def test_sample_scenario(self):
        baseline = BaselineSnapshot(reset_date=WEEK_1, boss_kills=(boss("Boss A", normal=2),))
        current = [boss("Boss A", normal=2, heroic=1), boss("Boss B", normal=1)]

        result = reconcile(current, baseline, WEEK_1)

        assert result.count == 2
        assert list(result.details) == [
            detail("Boss A", "Heroic", 4),
            detail("Boss B", "Normal", 3),
        ]

    def test_mythic_increase_wins_over_lower_difficulties(self):
        baseline = BaselineSnapshot(reset_date=WEEK_1, boss_kills=(boss("Boss A", 1, 1, 1),))
        current = [boss("Boss A", normal=2, heroic=2, mythic=2)]

        result = reconcile(current, baseline, WEEK_1)

        assert list(result.details) == [detail("Boss A", "Mythic", 5)]
        assert result.count == 1

    def test_details_sorted_mythic_heroic_normal(self):
        baseline = BaselineSnapshot(reset_date=WEEK_1, boss_kills=())
        current = [
            boss("Normal Boss", normal=1),
            boss("Heroic Boss", heroic=1),
            boss("Mythic Boss", mythic=1),
            boss("Second Heroic", heroic=3),
        ]

        result = reconcile(current, baseline, WEEK_1)

        assert [d.difficulty for d in result.details] == ["Mythic", "Heroic", "Heroic", "Normal"]
        # ties keep input order
        assert [d.boss_name for d in result.details][1:3] == ["Heroic Boss", "Second Heroic"]

    def test_decreased_counts_are_never_kills(self):
        baseline = BaselineSnapshot(reset_date=WEEK_1, boss_kills=(boss("Boss A", normal=4, heroic=2),))
        current = [boss("Boss A", normal=1, heroic=0)]

        result = reconcile(current, baseline, WEEK_1)

        assert result.count == 0

    def test_boss_missing_from_baseline_counts_from_zero(self):
        baseline = BaselineSnapshot(reset_date=WEEK_1, boss_kills=(boss("Boss A", normal=1),))
        current = [boss("Boss A", normal=1), boss("New Wing Boss", heroic=1)]

        result = reconcile(current, baseline, WEEK_1)

        assert list(result.details) == [detail("New Wing Boss", "Heroic", 4)]

    def test_keeps_start_of_week_snapshot_and_records_latest(self):
        start = (boss("Boss A", normal=2),)
        baseline = BaselineSnapshot(reset_date=WEEK_1, boss_kills=start, latest_kills=start)
        current = [boss("Boss A", normal=3)]

        result = reconcile(current, baseline, WEEK_1)

        assert result.new_baseline.reset_date == WEEK_1
        assert result.new_baseline.boss_kills == start
        assert result.new_baseline.latest_kills == (boss("Boss A", normal=3),)

    def test_second_call_with_same_counters_finds_no_new_progress(self):
        first = reconcile([boss("Boss A", normal=2)], None, WEEK_1)
        second = reconcile([boss("Boss A", normal=2)], first.new_baseline, WEEK_1)

        assert second.count == 0
        assert second.new_baseline == first.new_baseline

    def test_repeated_calls_keep_reporting_the_week(self):
        baseline = BaselineSnapshot(reset_date=WEEK_1, boss_kills=(boss("Boss A"),))
        current = [boss("Boss A", heroic=1)]

        first = reconcile(current, baseline, WEEK_1)
        second = reconcile(current, first.new_baseline, WEEK_1)

        assert first.details == second.details


class TestRollover:
    def test_compares_against_latest_kills_not_start_of_week(self):
        baseline = BaselineSnapshot(
            reset_date=WEEK_1,
            boss_kills=(boss("Boss A", heroic=1),),
            latest_kills=(boss("Boss A", heroic=3),),
        )
        current = [boss("Boss A", heroic=3)]

        result = reconcile(current, baseline, WEEK_2)

        assert result.count == 0

    def test_new_week_kill_detected_against_latest(self):
        baseline = BaselineSnapshot(
            reset_date=WEEK_1,
            boss_kills=(boss("Boss A", heroic=1),),
            latest_kills=(boss("Boss A", heroic=3),),
        )
        current = [boss("Boss A", heroic=4)]

        result = reconcile(current, baseline, WEEK_2)

        assert list(result.details) == [detail("Boss A", "Heroic", 4)]

    def test_reseeds_baseline_for_new_week(self):
        latest = (boss("Boss A", heroic=3),)
        baseline = BaselineSnapshot(reset_date=WEEK_1, boss_kills=(boss("Boss A", heroic=1),), latest_kills=latest)
        current = [boss("Boss A", heroic=4)]

        result = reconcile(current, baseline, WEEK_2)

        assert result.new_baseline == BaselineSnapshot(
            reset_date=WEEK_2,
            boss_kills=latest,
            latest_kills=(boss("Boss A", heroic=4),),
        )

    def test_falls_back_to_boss_kills_without_latest(self):
        baseline = BaselineSnapshot(reset_date=WEEK_1, boss_kills=(boss("Boss A", normal=1),), latest_kills=None)
        current = [boss("Boss A", normal=2)]

        result = reconcile(current, baseline, WEEK_2)

        assert result.count == 1
        assert result.new_baseline.boss_kills == (boss("Boss A", normal=1),)
        assert result.new_baseline.reset_date == WEEK_2


def test_inputs_are_not_mutated():
    current = [boss("Boss A", normal=3)]
    baseline = BaselineSnapshot(reset_date=WEEK_1, boss_kills=(boss("Boss A", normal=1),))

    result = reconcile(current, baseline, WEEK_1)
    current.append(boss("Boss B", normal=1))

    assert current[0] == boss("Boss A", normal=3)
    assert baseline.latest_kills is None
    assert len(result.new_baseline.latest_kills) == 1


class TestPickMoreComplete:
    def test_longer_secondary_wins(self):
        primary = [detail("Boss A", "Heroic", 4)]
        secondary = [detail("Boss A", "Normal", 3), detail("Boss B", "Normal", 3)]

        assert pick_more_complete(primary, secondary) == secondary

    def test_tie_keeps_primary(self):
        primary = [detail("Boss A", "Heroic", 4)]
        secondary = [detail("Boss A", "Normal", 3)]

        assert pick_more_complete(primary, secondary) == primary

    def test_empty_sources(self):
        assert pick_more_complete([], []) == []


def test_merge_boss_kills_takes_max_per_difficulty():
    first = [boss("Boss A", normal=3, heroic=1), boss("Boss B", normal=1)]
    second = [boss("Boss A", normal=2, heroic=2, mythic=1), boss("Boss C", heroic=1)]

    merged = merge_boss_kills(first, second)

    assert merged == [
        boss("Boss A", normal=3, heroic=2, mythic=1),
        boss("Boss B", normal=1),
        boss("Boss C", heroic=1),
    ]


@pytest.mark.parametrize("kills, slots", [(0, 0), (1, 0), (2, 1), (3, 1), (4, 2), (6, 3), (9, 3)])
def test_raid_vault_slots(kills, slots):
    assert raid_vault_slots(kills) == slots
