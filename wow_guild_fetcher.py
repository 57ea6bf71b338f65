import json
import logging
import os
import time
from datetime import datetime
from typing import Dict, Any, List

import requests

import config
from wow_guild_helpers import (
    LOGGER_NAME,
    slugify,
    get_class_name_from_id,
    parse_recent_runs,
    counters_from_zone_rankings,
    filter_reports_since,
    weekly_kills_from_fights,
)
from wow_guild_models import MPlusRunRecord, WeeklyKillDetail

logger = logging.getLogger(LOGGER_NAME)

RAIDERIO_PROFILE_URL = "https://raider.io/api/v1/characters/profile"
WCL_TOKEN_URL = "https://www.warcraftlogs.com/oauth/token"
WCL_API_URL = "https://www.warcraftlogs.com/api/v2/client"

WCL_CHARACTER_QUERY = """
query ($name: String!, $server: String!, $region: String!, $zoneID: Int, $limit: Int) {
  characterData {
    character(name: $name, serverSlug: $server, serverRegion: $region) {
      mythic: zoneRankings(zoneID: $zoneID, difficulty: 5)
      heroic: zoneRankings(zoneID: $zoneID, difficulty: 4)
      normal: zoneRankings(zoneID: $zoneID, difficulty: 3)
      recentReports(limit: $limit) {
        data {
          code
          startTime
          endTime
          zone { id name }
        }
      }
    }
  }
}
"""


class WoWGuildFetcher:
    def __init__(self, client_id, client_secret, guild_name, realm, region="eu",
                 wcl_client_id=None, wcl_client_secret=None, data_dir='guild_data',
                 timeout=30, max_retries=3, report_limit=15):
        self.client_id = client_id
        self.client_secret = client_secret
        self.wcl_client_id = wcl_client_id
        self.wcl_client_secret = wcl_client_secret
        self.guild_name = guild_name
        self.realm = realm
        self.region = region
        self.data_dir = data_dir
        self.timeout = timeout
        self.max_retries = max_retries
        self.report_limit = report_limit
        self.base_url = f"https://{region}.api.blizzard.com"
        self.namespace = f"profile-{region}"
        self.offline_mode = False

        # {service: (token, expiry)}
        self._tokens: Dict[str, tuple] = {}

        logger.info(f"Initializing WoWGuildFetcher for guild '{guild_name}' on realm '{realm}' ({region})")

    @classmethod
    def from_config(cls, guild_name=None, realm=None, region=None):
        """Build a fetcher from the values in config.py"""
        return cls(
            config.BLIZZARD_CLIENT_ID,
            config.BLIZZARD_CLIENT_SECRET,
            guild_name or config.DEFAULT_GUILD_NAME,
            realm or config.DEFAULT_REALM,
            region or config.DEFAULT_REGION,
            wcl_client_id=config.WCL_CLIENT_ID,
            wcl_client_secret=config.WCL_CLIENT_SECRET,
            data_dir=config.GUILD_DATA_DIR,
            timeout=config.REQUEST_TIMEOUT,
            max_retries=config.MAX_RATE_LIMIT_RETRIES,
            report_limit=config.WCL_RECENT_REPORTS,
        )

    @property
    def wcl_enabled(self):
        return bool(self.wcl_client_id and self.wcl_client_secret)

    # ------------------------------------------------------------------
    # OAuth
    # ------------------------------------------------------------------

    def _get_token(self, service, token_url, auth, offline_mode=False):
        """Client-credentials token for `service`, cached in memory and on disk

        Args:
            service (str): Cache name, e.g. 'blizzard' or 'wcl'
            token_url (str): OAuth token endpoint
            auth (tuple): (client_id, client_secret)
            offline_mode (bool): If True, use the cached token file even if expired
                                 and never fetch a new one
        """
        offline_mode = offline_mode or self.offline_mode
        now = time.time()
        token_cache_file = os.path.join(self.data_dir, f'{service}_token_cache.json')

        cached_token, expiry = self._tokens.get(service, (None, 0))
        if cached_token and now < expiry:
            logger.debug(f"Using cached {service} access token from memory (still valid)")
            return cached_token

        if os.path.exists(token_cache_file):
            try:
                with open(token_cache_file, 'r') as f:
                    cached = json.load(f)
                if offline_mode:
                    logger.warning(f"OFFLINE MODE: Using cached {service} token from file regardless of expiry")
                    self._tokens[service] = (cached["access_token"], cached["expiry"])
                    return cached["access_token"]
                if now < cached["expiry"]:
                    logger.debug(f"Using cached {service} access token from file (still valid)")
                    self._tokens[service] = (cached["access_token"], cached["expiry"])
                    return cached["access_token"]
            except (OSError, ValueError, KeyError) as e:
                logger.warning(f"Error reading {service} token cache: {str(e)}")

        if offline_mode:
            logger.error(f"OFFLINE MODE: No valid {service} token cache found and cannot fetch new token")
            raise ValueError("Cannot operate in offline mode without a cached token")

        logger.info(f"Requesting new OAuth access token for {service}")
        try:
            response = requests.post(token_url, data={"grant_type": "client_credentials"},
                                     auth=auth, timeout=self.timeout)
            response.raise_for_status()

            token_data = response.json()
            access_token = token_data["access_token"]
            expiry = now + token_data["expires_in"] - 300  # Subtract 5 minutes for safety
            self._tokens[service] = (access_token, expiry)

            os.makedirs(self.data_dir, exist_ok=True)
            with open(token_cache_file, 'w') as f:
                json.dump({"access_token": access_token, "expiry": expiry}, f)

            logger.info(f"Obtained {service} access token (expires in {token_data['expires_in'] // 60} minutes)")
            return access_token

        except requests.exceptions.ConnectionError as e:
            logger.error(f"Network connection error: {str(e)}")
            logger.debug("Connection error details:", exc_info=True)
            raise ConnectionError(f"Cannot connect to {service} OAuth endpoint. Check your internet connection.") from e

        except requests.exceptions.Timeout as e:
            logger.error(f"Request timeout: {str(e)}")
            logger.debug("Timeout error details:", exc_info=True)
            raise TimeoutError(f"{service} token request timed out.") from e

    def get_access_token(self, offline_mode=False):
        """Get OAuth access token from Blizzard API"""
        return self._get_token(
            'blizzard',
            f"https://{self.region}.battle.net/oauth/token",
            (self.client_id, self.client_secret),
            offline_mode=offline_mode,
        )

    def get_wcl_access_token(self, offline_mode=False):
        """Get OAuth access token from WarcraftLogs"""
        return self._get_token(
            'wcl',
            WCL_TOKEN_URL,
            (self.wcl_client_id, self.wcl_client_secret),
            offline_mode=offline_mode,
        )

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    def _send(self, method, url, **kwargs):
        """Send a request, waiting out HTTP 429 responses up to max_retries times"""
        kwargs.setdefault('timeout', self.timeout)
        attempt = 0
        while True:
            try:
                response = requests.request(method, url, **kwargs)
            except requests.exceptions.ConnectionError as e:
                logger.error(f"Network connection error for {url}: {str(e)}")
                raise ConnectionError(f"Cannot connect to {url}") from e
            except requests.exceptions.Timeout as e:
                logger.error(f"Request timeout for {url}: {str(e)}")
                raise TimeoutError(f"Request to {url} timed out.") from e

            if response.status_code != 429 or attempt >= self.max_retries:
                break

            attempt += 1
            retry_after = int(response.headers.get("Retry-After", 1))
            logger.warning(f"Rate limited by {url}. Waiting {retry_after} seconds before retry "
                           f"({attempt}/{self.max_retries})...")
            time.sleep(retry_after)

        logger.debug(f"API response status: {response.status_code}")
        response.raise_for_status()
        return response.json()

    def make_api_request(self, endpoint, params=None):
        """Make an authenticated request to the WoW API"""
        if params is None:
            params = {}

        params["namespace"] = self.namespace
        params["locale"] = "en_US"

        url = f"{self.base_url}{endpoint}"
        logger.debug(f"Making API request to: {url}")

        headers = {"Authorization": f"Bearer {self.get_access_token()}"}

        try:
            return self._send('GET', url, headers=headers, params=params)
        except requests.exceptions.RequestException as e:
            logger.error(f"API request error for {endpoint}: {str(e)}")
            logger.debug("API error details:", exc_info=True)
            raise

    def query_wcl(self, query, variables=None):
        """Run a WarcraftLogs v2 GraphQL query and return its `data` object"""
        headers = {"Authorization": f"Bearer {self.get_wcl_access_token()}"}
        result = self._send('POST', WCL_API_URL, headers=headers,
                            json={"query": query, "variables": variables or {}})
        if result.get('errors'):
            logger.warning(f"WarcraftLogs query returned errors: {result['errors']}")
        return result.get('data') or {}

    # ------------------------------------------------------------------
    # Blizzard roster
    # ------------------------------------------------------------------

    def get_guild_roster(self):
        """Get the guild's roster of characters"""
        endpoint = f"/data/wow/guild/{slugify(self.realm)}/{slugify(self.guild_name)}/roster"
        return self.make_api_request(endpoint)

    def get_roster_members(self, min_level=None) -> List[Dict[str, Any]]:
        """Roster members as {'name', 'realm', 'class', 'level', 'rank'} dicts

        Args:
            min_level (int, optional): Skip characters below this level
        """
        roster = self.get_guild_roster()
        members = []

        for member in (roster or {}).get('members', []):
            character = member.get('character') or {}
            name = character.get('name')
            if not name:
                continue

            level = character.get('level', 0)
            if min_level and level < min_level:
                continue

            realm = self.realm
            if isinstance(character.get('realm'), dict):
                realm = character['realm'].get('name') or character['realm'].get('slug') or realm

            class_name = "Unknown"
            playable_class = character.get('playable_class')
            if isinstance(playable_class, dict):
                class_name = playable_class.get('name') or get_class_name_from_id(playable_class.get('id'))

            members.append({
                'name': name,
                'realm': realm,
                'class': class_name,
                'level': level,
                'rank': member.get('rank', 99),
            })

        logger.info(f"Roster has {len(members)} characters to track")
        return members

    # ------------------------------------------------------------------
    # Raider.io
    # ------------------------------------------------------------------

    def get_raiderio_profile(self, character_name, realm=None):
        """Raider.io profile with recent Mythic+ runs, or None if not found"""
        params = {
            'region': self.region,
            'realm': slugify(realm or self.realm),
            'name': character_name.lower(),
            'fields': 'mythic_plus_recent_runs',
        }
        logger.info(f"Fetching Raider.io profile for '{character_name}' on realm '{params['realm']}'")
        try:
            return self._send('GET', RAIDERIO_PROFILE_URL, params=params)
        except requests.exceptions.HTTPError as e:
            if e.response is not None and e.response.status_code in (400, 404):
                logger.warning(f"Character '{character_name}' not found on Raider.io")
                return None
            raise

    def get_recent_runs(self, character_name, realm=None) -> List[MPlusRunRecord]:
        return parse_recent_runs(self.get_raiderio_profile(character_name, realm))

    # ------------------------------------------------------------------
    # WarcraftLogs
    # ------------------------------------------------------------------

    def get_wcl_character(self, character_name, realm=None, zone_id=None, report_limit=None):
        """WarcraftLogs character with zone rankings and recent reports, or None"""
        variables = {
            'name': character_name,
            'server': slugify(realm or self.realm),
            'region': self.region,
            'zoneID': zone_id,
            'limit': report_limit or self.report_limit,
        }
        data = self.query_wcl(WCL_CHARACTER_QUERY, variables)
        character = (data.get('characterData') or {}).get('character')
        if not character:
            logger.warning(f"No WarcraftLogs data found for {character_name}-{variables['server']} ({self.region})")
        return character

    def get_report_kill_fights(self, report_codes) -> List[Dict[str, Any]]:
        """Boss kill fights for several reports, fetched in a single aliased query"""
        if not report_codes:
            return []
        aliases = "\n".join(
            f'r{i}: report(code: "{code}") {{ fights(killType: Kills) {{ encounterID name difficulty }} }}'
            for i, code in enumerate(report_codes)
        )
        data = self.query_wcl(f"query {{ reportData {{ {aliases} }} }}")

        fights = []
        for report in (data.get('reportData') or {}).values():
            fights.extend((report or {}).get('fights') or [])
        return fights

    def get_raid_activity(self, character_name, realm, reset_time: datetime, zone_id=None):
        """Lifetime boss counters and this week's kills according to WarcraftLogs

        Returns:
            tuple: (list of BossKillCounter or None, list of WeeklyKillDetail).
            The counters are None when WarcraftLogs had nothing to say about the
            character, as opposed to an empty list for a character with no kills.
        """
        weekly: List[WeeklyKillDetail] = []
        if not self.wcl_enabled:
            logger.debug("WarcraftLogs credentials not configured, skipping raid activity")
            return None, weekly

        character = self.get_wcl_character(character_name, realm, zone_id=zone_id)
        if not character:
            return None, weekly

        counters = counters_from_zone_rankings({
            'normal': character.get('normal'),
            'heroic': character.get('heroic'),
            'mythic': character.get('mythic'),
        })

        reports = (character.get('recentReports') or {}).get('data') or []
        this_week = filter_reports_since(reports, reset_time, zone_id)
        logger.debug(f"{character_name}: {len(this_week)} of {len(reports)} recent reports are from this reset")
        if this_week:
            fights = self.get_report_kill_fights([report['code'] for report in this_week])
            weekly = weekly_kills_from_fights(fights)

        return counters, weekly
