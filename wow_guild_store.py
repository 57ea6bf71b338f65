"""
JSON persistence for weekly progress

Baselines must survive between sync passes, so each character's latest
record (including the baseline returned by reconcile) is kept in
guild_data/weekly_progress.json.
"""

import json
import logging
import os
import tempfile
from typing import Dict, Optional

from wow_guild_helpers import LOGGER_NAME
from wow_guild_models import BaselineSnapshot, CharacterWeeklyRecord

logger = logging.getLogger(LOGGER_NAME)

PROGRESS_FILE = 'weekly_progress.json'


class WeeklyProgressStore:
    def __init__(self, guild_data_path='guild_data'):
        self.guild_data_path = guild_data_path
        self.path = os.path.join(guild_data_path, PROGRESS_FILE)
        self._characters: Dict[str, CharacterWeeklyRecord] = self._load()

    def _load(self):
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return {
                key: CharacterWeeklyRecord.from_dict(record)
                for key, record in data.get('characters', {}).items()
            }
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Could not load {self.path}, starting with an empty store: {str(e)}")
            return {}

    def _write(self):
        os.makedirs(self.guild_data_path, exist_ok=True)
        payload = {'characters': {key: record.to_dict() for key, record in self._characters.items()}}

        # Write to a temp file first so a crash never leaves half a baseline file
        fd, tmp_path = tempfile.mkstemp(dir=self.guild_data_path, suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(payload, f, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            os.unlink(tmp_path)
            raise

    def keys(self):
        return list(self._characters)

    def get_character(self, key) -> Optional[CharacterWeeklyRecord]:
        return self._characters.get(key)

    def get_baseline(self, key) -> Optional[BaselineSnapshot]:
        record = self._characters.get(key)
        return record.baseline if record else None

    def save_character(self, key, record: CharacterWeeklyRecord):
        self._characters[key] = record
        self._write()
        logger.debug(f"Saved weekly progress for {key}")

    def all_records(self):
        return list(self._characters.values())
