"""
Configuration module for the WoW Guild Weekly Tracker

This module loads environment variables from .env file and provides
configuration settings for the application.
"""

import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Blizzard API Configuration
BLIZZARD_CLIENT_ID = os.getenv('BLIZZARD_CLIENT_ID', '')
BLIZZARD_CLIENT_SECRET = os.getenv('BLIZZARD_CLIENT_SECRET', '')

# WarcraftLogs API Configuration
WCL_CLIENT_ID = os.getenv('WCL_CLIENT_ID', '')
WCL_CLIENT_SECRET = os.getenv('WCL_CLIENT_SECRET', '')
WCL_ZONE_ID = int(os.getenv('WCL_ZONE_ID', '42'))  # Liberation of Undermine
WCL_RECENT_REPORTS = int(os.getenv('WCL_RECENT_REPORTS', '15'))

# Default Guild Settings
DEFAULT_GUILD_NAME = os.getenv('DEFAULT_GUILD_NAME', 'Shadow Company')
DEFAULT_REALM = os.getenv('DEFAULT_REALM', 'Duskwood')
DEFAULT_REGION = os.getenv('DEFAULT_REGION', 'eu')

# Application Settings
GUILD_DATA_DIR = os.getenv('GUILD_DATA_DIR', 'guild_data')
MAX_LEVEL = int(os.getenv('MAX_LEVEL', '80'))
MIN_KEYSTONE_LEVEL = int(os.getenv('MIN_KEYSTONE_LEVEL', '10'))
REQUEST_TIMEOUT = int(os.getenv('REQUEST_TIMEOUT', '30'))
MAX_RATE_LIMIT_RETRIES = int(os.getenv('MAX_RATE_LIMIT_RETRIES', '3'))

VALID_REGIONS = ['us', 'eu', 'kr', 'tw']


def validate_config():
    """Validate required configuration settings"""
    missing = []

    # Check required Blizzard API credentials
    if not BLIZZARD_CLIENT_ID or not BLIZZARD_CLIENT_SECRET:
        missing.append("Blizzard API credentials (BLIZZARD_CLIENT_ID, BLIZZARD_CLIENT_SECRET)")

    # WarcraftLogs is optional: without it there are no boss kill counters
    if not WCL_CLIENT_ID or not WCL_CLIENT_SECRET:
        print("⚠️ WCL_CLIENT_ID/WCL_CLIENT_SECRET not set - raid kill tracking will be disabled")

    # Check other required settings
    if not DEFAULT_GUILD_NAME or not DEFAULT_REALM or not DEFAULT_REGION:
        missing.append("Default guild settings (DEFAULT_GUILD_NAME, DEFAULT_REALM, DEFAULT_REGION)")
    elif DEFAULT_REGION not in VALID_REGIONS:
        missing.append(f"Valid DEFAULT_REGION (one of {', '.join(VALID_REGIONS)})")

    if missing:
        raise ValueError(f"Missing required configuration: {', '.join(missing)}")

    return True


def wcl_enabled():
    """True when WarcraftLogs credentials are configured"""
    return bool(WCL_CLIENT_ID and WCL_CLIENT_SECRET)


def print_config_info():
    """Print current configuration information"""
    print("\n📝 Configuration Information")
    print("=" * 50)

    print(f"Guild: {DEFAULT_GUILD_NAME} ({DEFAULT_REALM}-{DEFAULT_REGION})")
    print(f"Max Level: {MAX_LEVEL}")
    print(f"Minimum Keystone Level: {MIN_KEYSTONE_LEVEL}")
    print(f"Data Directory: {GUILD_DATA_DIR}")

    print("\nAPI Configuration:")
    print(f"Blizzard API: {'✅ Configured' if BLIZZARD_CLIENT_ID else '❌ Missing'}")
    print(f"WarcraftLogs: {'✅ Configured' if wcl_enabled() else '⚠️ Disabled'} (zone {WCL_ZONE_ID})")
    print(f"Request Timeout: {REQUEST_TIMEOUT}s")
