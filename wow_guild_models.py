"""
Data model for weekly raid and Mythic+ tracking

All records are frozen dataclasses so that the weekly computations can
return new values instead of mutating what the caller passed in.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Dict, Any, Optional, Tuple

from wow_guild_reset import parse_timestamp


class Difficulty(IntEnum):
    """Raid difficulties, valued by their WarcraftLogs difficulty id."""
    NORMAL = 3
    HEROIC = 4
    MYTHIC = 5

    @property
    def label(self):
        return self.name.capitalize()

    @classmethod
    def from_label(cls, label):
        return cls[label.upper()]


@dataclass(frozen=True)
class BossKillCounter:
    """Lifetime kill counts for one raid boss, as reported by an external source."""
    name: str
    normal: int = 0
    heroic: int = 0
    mythic: int = 0

    def kills_at(self, difficulty: Difficulty) -> int:
        return getattr(self, difficulty.name.lower())

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'normal': self.normal,
            'heroic': self.heroic,
            'mythic': self.mythic,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BossKillCounter':
        return cls(
            name=data['name'],
            normal=int(data.get('normal') or 0),
            heroic=int(data.get('heroic') or 0),
            mythic=int(data.get('mythic') or 0),
        )


@dataclass(frozen=True)
class WeeklyKillDetail:
    """A boss first killed at `difficulty` since the last weekly reset."""
    boss_name: str
    difficulty: str
    difficulty_id: int

    @classmethod
    def for_difficulty(cls, boss_name: str, difficulty: Difficulty) -> 'WeeklyKillDetail':
        return cls(boss_name=boss_name, difficulty=difficulty.label, difficulty_id=int(difficulty))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'boss_name': self.boss_name,
            'difficulty': self.difficulty,
            'difficulty_id': self.difficulty_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WeeklyKillDetail':
        return cls(
            boss_name=data['boss_name'],
            difficulty=data['difficulty'],
            difficulty_id=int(data['difficulty_id']),
        )


def _counters_from_list(items) -> Tuple[BossKillCounter, ...]:
    return tuple(BossKillCounter.from_dict(item) for item in items or [])


@dataclass(frozen=True)
class BaselineSnapshot:
    """Reference counters used to work out progress since the weekly reset.

    boss_kills is the snapshot taken at the start of the reset window,
    latest_kills the most recent observation (None when never recorded).
    """
    reset_date: str
    boss_kills: Tuple[BossKillCounter, ...] = ()
    latest_kills: Optional[Tuple[BossKillCounter, ...]] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'reset_date': self.reset_date,
            'boss_kills': [counter.to_dict() for counter in self.boss_kills],
        }
        if self.latest_kills is not None:
            data['latest_kills'] = [counter.to_dict() for counter in self.latest_kills]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BaselineSnapshot':
        latest = data.get('latest_kills')
        return cls(
            reset_date=data['reset_date'],
            boss_kills=_counters_from_list(data.get('boss_kills')),
            latest_kills=_counters_from_list(latest) if latest is not None else None,
        )


@dataclass(frozen=True)
class ReconcileResult:
    count: int
    details: Tuple[WeeklyKillDetail, ...]
    new_baseline: BaselineSnapshot


@dataclass(frozen=True)
class MPlusRunRecord:
    """A completed Mythic+ dungeon run (read-only input)."""
    mythic_level: int
    completed_at: datetime
    dungeon: str = ''
    short_name: str = ''
    num_keystone_upgrades: int = 0
    score: float = 0.0
    url: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'dungeon': self.dungeon,
            'short_name': self.short_name,
            'mythic_level': self.mythic_level,
            'completed_at': self.completed_at.isoformat(),
            'num_keystone_upgrades': self.num_keystone_upgrades,
            'score': self.score,
            'url': self.url,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MPlusRunRecord':
        return cls(
            mythic_level=int(data.get('mythic_level') or 0),
            completed_at=parse_timestamp(data['completed_at']),
            dungeon=data.get('dungeon') or '',
            short_name=data.get('short_name') or '',
            num_keystone_upgrades=int(data.get('num_keystone_upgrades') or 0),
            score=float(data.get('score') or 0.0),
            url=data.get('url') or '',
        )


@dataclass(frozen=True)
class VaultSlot:
    """One Great Vault reward slot."""
    unlocked: bool = False
    key_level: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {'unlocked': self.unlocked, 'key_level': self.key_level}


@dataclass
class CharacterWeeklyRecord:
    """Everything the sync pass persists for one character."""
    name: str
    realm: str
    character_class: str = ''
    baseline: Optional[BaselineSnapshot] = None
    weekly_raid_boss_kills: int = 0
    weekly_raid_kill_details: Tuple[WeeklyKillDetail, ...] = ()
    weekly_history: Tuple[int, ...] = (0, 0, 0, 0)
    weekly_ten_plus_count: int = 0
    raid_vault_slots: int = 0
    dungeon_vault_slots: Tuple[VaultSlot, ...] = field(default_factory=tuple)
    updated_at: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'realm': self.realm,
            'character_class': self.character_class,
            'baseline': self.baseline.to_dict() if self.baseline else None,
            'weekly_raid_boss_kills': self.weekly_raid_boss_kills,
            'weekly_raid_kill_details': [d.to_dict() for d in self.weekly_raid_kill_details],
            'weekly_history': list(self.weekly_history),
            'weekly_ten_plus_count': self.weekly_ten_plus_count,
            'raid_vault_slots': self.raid_vault_slots,
            'dungeon_vault_slots': [s.to_dict() for s in self.dungeon_vault_slots],
            'updated_at': self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CharacterWeeklyRecord':
        baseline = data.get('baseline')
        return cls(
            name=data.get('name', ''),
            realm=data.get('realm', ''),
            character_class=data.get('character_class', ''),
            baseline=BaselineSnapshot.from_dict(baseline) if baseline else None,
            weekly_raid_boss_kills=int(data.get('weekly_raid_boss_kills') or 0),
            weekly_raid_kill_details=tuple(
                WeeklyKillDetail.from_dict(d) for d in data.get('weekly_raid_kill_details') or []
            ),
            weekly_history=tuple(data.get('weekly_history') or (0, 0, 0, 0)),
            weekly_ten_plus_count=int(data.get('weekly_ten_plus_count') or 0),
            raid_vault_slots=int(data.get('raid_vault_slots') or 0),
            dungeon_vault_slots=tuple(
                VaultSlot(bool(s.get('unlocked')), int(s.get('key_level') or 0))
                for s in data.get('dungeon_vault_slots') or []
            ),
            updated_at=data.get('updated_at', ''),
        )
