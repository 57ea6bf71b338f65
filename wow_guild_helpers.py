"""
Helper functions for the WoW Guild Weekly Tracker
Contains logging setup, name normalisation and parsers that turn raw
Raider.io / WarcraftLogs payloads into the tracker's data model.
"""

import logging
import os
import sys
from datetime import datetime
from typing import Dict, Any, List, Optional

from wow_guild_models import BossKillCounter, Difficulty, MPlusRunRecord, WeeklyKillDetail
from wow_guild_reset import parse_timestamp

LOGGER_NAME = 'wow_guild_tracker'

logger = logging.getLogger(LOGGER_NAME)


def setup_logging(log_level=logging.INFO, log_to_file=True, data_dir='guild_data'):
    """Configure logging with console and optional file output"""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)
    logger.handlers = []  # Clear any existing handlers

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_to_file:
        log_dir = os.path.join(data_dir, 'logs')
        os.makedirs(log_dir, exist_ok=True)
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        log_file = os.path.join(log_dir, f'wow_guild_tracker_{timestamp}.log')

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
        print(f"Logging to file: {log_file}")

    return logger


def get_class_name_from_id(class_id):
    """Map a class ID to a class name."""
    class_mapping = {
        1: "Warrior",
        2: "Paladin",
        3: "Hunter",
        4: "Rogue",
        5: "Priest",
        6: "Death Knight",
        7: "Shaman",
        8: "Mage",
        9: "Warlock",
        10: "Monk",
        11: "Druid",
        12: "Demon Hunter",
        13: "Evoker"
    }
    return class_mapping.get(class_id, "Unknown")


def slugify(name):
    """Realm/guild slug as the Blizzard and WarcraftLogs APIs expect it."""
    return name.strip().lower().replace("'", '').replace(' ', '-')


def character_key(name, realm):
    """Stable storage key for a character, e.g. 'thrall-area-52'."""
    return f"{name.strip().lower()}-{slugify(realm)}"


def parse_recent_runs(profile: Optional[Dict[str, Any]]) -> List[MPlusRunRecord]:
    """Extract the recent Mythic+ runs from a Raider.io character profile."""
    if not profile:
        return []

    runs = []
    for run in profile.get('mythic_plus_recent_runs') or []:
        if not run.get('completed_at'):
            logger.debug(f"Skipping run without completion time: {run.get('dungeon')}")
            continue
        runs.append(MPlusRunRecord.from_dict(run))
    return runs


def counters_from_zone_rankings(zone_rankings: Dict[str, Optional[Dict[str, Any]]]) -> List[BossKillCounter]:
    """Build lifetime boss kill counters from WarcraftLogs zoneRankings.

    Args:
        zone_rankings: Mapping of 'normal'/'heroic'/'mythic' to the
            zoneRankings JSON for that difficulty (or None).

    Returns:
        list: One BossKillCounter per encounter, in first-seen order
    """
    counts: Dict[str, Dict[str, int]] = {}
    for difficulty in Difficulty:
        key = difficulty.name.lower()
        ranking_data = zone_rankings.get(key) or {}
        for ranking in ranking_data.get('rankings') or []:
            encounter = ranking.get('encounter') or {}
            boss_name = encounter.get('name')
            if not boss_name:
                continue
            boss = counts.setdefault(boss_name, {'normal': 0, 'heroic': 0, 'mythic': 0})
            boss[key] = max(boss[key], int(ranking.get('totalKills') or 0))

    return [BossKillCounter(name=name, **kills) for name, kills in counts.items()]


def filter_reports_since(reports: List[Dict[str, Any]], reset_time: datetime,
                         zone_id: Optional[int] = None) -> List[Dict[str, Any]]:
    """Keep WarcraftLogs reports that started after the reset, in the given zone."""
    selected = []
    for report in reports or []:
        start = report.get('startTime')
        if start is None or parse_timestamp(start) < reset_time:
            continue
        report_zone = (report.get('zone') or {}).get('id')
        if zone_id and report_zone and report_zone != zone_id:
            continue
        selected.append(report)
    return selected


def weekly_kills_from_fights(fights: List[Dict[str, Any]]) -> List[WeeklyKillDetail]:
    """Highest-difficulty kill per boss from WarcraftLogs report fights.

    Fights outside Normal/Heroic/Mythic (LFR, trash) are ignored. Result is
    sorted mythic first.
    """
    best: Dict[str, Difficulty] = {}
    for fight in fights:
        if not fight.get('encounterID'):
            continue
        try:
            difficulty = Difficulty(fight.get('difficulty') or 0)
        except ValueError:
            continue
        boss_name = fight.get('name') or f"encounter-{fight['encounterID']}"
        if boss_name not in best or difficulty > best[boss_name]:
            best[boss_name] = difficulty

    details = [WeeklyKillDetail.for_difficulty(name, difficulty) for name, difficulty in best.items()]
    return sorted(details, key=lambda d: d.difficulty_id, reverse=True)
