"""
Weekly sync pass

Fetches each character's raid and Mythic+ activity, reconciles it against the
stored baseline and writes the result back to the store. Characters are
processed one at a time so a baseline never has two writers in one pass.
"""

import logging
from datetime import datetime
from typing import Dict, Any, List, Optional

import requests

from wow_guild_helpers import LOGGER_NAME, character_key
from wow_guild_models import CharacterWeeklyRecord
from wow_guild_mplus import (
    MIN_KEYSTONE_LEVEL,
    bucket_weekly_history,
    count_weekly_runs,
    dungeon_vault_slots,
)
from wow_guild_reset import get_reset_time, to_utc
from wow_guild_weekly import pick_more_complete, raid_vault_slots, reconcile

logger = logging.getLogger(LOGGER_NAME)


def sync_character(fetcher, store, name, realm, now: datetime, character_class='',
                   zone_id=None, min_level=MIN_KEYSTONE_LEVEL) -> CharacterWeeklyRecord:
    """Refresh one character's weekly record and persist it

    Args:
        fetcher: WoWGuildFetcher (or anything with get_recent_runs/get_raid_activity)
        store: WeeklyProgressStore
        name (str): Character name
        realm (str): Realm name
        now (datetime): Current time; decides which reset window applies
        character_class (str): Class shown in reports
        zone_id (int, optional): WarcraftLogs raid zone to track
        min_level (int): Keystone level floor for the Mythic+ counts

    Returns:
        CharacterWeeklyRecord: The record that was saved
    """
    now = to_utc(now)
    reset_time = get_reset_time(now)
    reset_date = reset_time.date().isoformat()
    key = character_key(name, realm)

    runs = fetcher.get_recent_runs(name, realm)
    counters, wcl_weekly = fetcher.get_raid_activity(name, realm, reset_time, zone_id=zone_id)

    previous = store.get_character(key)
    baseline = store.get_baseline(key)

    if counters is None:
        # No raid data this time: keep the baseline as it was and don't lose
        # kills already recorded for this reset.
        logger.info(f"{name}-{realm}: no raid counters available, keeping stored baseline")
        new_baseline = baseline
        counted = []
        if previous and baseline and baseline.reset_date == reset_date:
            counted = list(previous.weekly_raid_kill_details)
    else:
        result = reconcile(counters, baseline, reset_date)
        new_baseline = result.new_baseline
        counted = result.details

    details = pick_more_complete(counted, wcl_weekly)
    if len(details) != len(counted):
        logger.debug(f"{name}: using WarcraftLogs report kills ({len(details)}) over counter diff ({len(counted)})")

    record = CharacterWeeklyRecord(
        name=name,
        realm=realm,
        character_class=character_class or (previous.character_class if previous else ''),
        baseline=new_baseline,
        weekly_raid_boss_kills=len(details),
        weekly_raid_kill_details=tuple(details),
        weekly_history=tuple(bucket_weekly_history(runs, reset_time, min_level)),
        weekly_ten_plus_count=count_weekly_runs(runs, reset_time, min_level),
        raid_vault_slots=raid_vault_slots(len(details)),
        dungeon_vault_slots=tuple(dungeon_vault_slots(runs, reset_time)),
        updated_at=now.isoformat(),
    )
    store.save_character(key, record)

    logger.info(f"{name}-{realm}: {record.weekly_raid_boss_kills} raid kills, "
                f"{record.weekly_ten_plus_count} runs at +{min_level} this week")
    return record


def sync_roster(fetcher, store, members: List[Dict[str, Any]], now: datetime,
                zone_id=None, min_level=MIN_KEYSTONE_LEVEL) -> Dict[str, List[str]]:
    """Sync every member in turn; one character failing does not stop the pass

    Args:
        members: Dicts with 'name', 'realm' and optionally 'class'

    Returns:
        dict: {'synced': [...], 'failed': [...]} character names
    """
    summary = {'synced': [], 'failed': []}
    total = len(members)

    for i, member in enumerate(members):
        name = member['name']
        realm = member.get('realm') or fetcher.realm
        try:
            sync_character(fetcher, store, name, realm, now,
                           character_class=member.get('class', ''),
                           zone_id=zone_id, min_level=min_level)
            summary['synced'].append(name)
        except (requests.exceptions.RequestException, ConnectionError, TimeoutError, ValueError) as e:
            logger.error(f"Error syncing character '{name}': {str(e)}")
            logger.debug("Sync error details:", exc_info=True)
            summary['failed'].append(name)

        if (i + 1) % 10 == 0:
            logger.info(f"Processed {i + 1}/{total} characters...")

    return summary


def parse_character_arg(value: str, default_realm: Optional[str] = None):
    """Split 'Name-Realm' into (name, realm); the realm may itself contain dashes."""
    name, sep, realm = value.partition('-')
    if not sep or not realm:
        if not default_realm:
            raise ValueError(f"Character '{value}' needs a realm (Name-Realm)")
        realm = default_realm
    return name.strip(), realm.strip()
