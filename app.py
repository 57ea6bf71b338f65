#!/usr/bin/env python3
import logging
import sys
from datetime import datetime, timezone

import click
import requests

import config
from wow_guild_fetcher import WoWGuildFetcher
from wow_guild_helpers import setup_logging
from wow_guild_report_generator import WeeklyReportGenerator
from wow_guild_reset import get_next_reset_time, get_reset_time, to_utc
from wow_guild_store import WeeklyProgressStore
from wow_guild_sync import parse_character_arg, sync_roster

NOW_FORMATS = ['%Y-%m-%dT%H:%M:%S', '%Y-%m-%d %H:%M:%S', '%Y-%m-%dT%H:%M', '%Y-%m-%d']


def resolve_now(now):
    """The wall clock, unless --now overrides it (naive values are UTC)"""
    if now is None:
        return datetime.now(timezone.utc)
    return to_utc(now)


@click.group()
def cli():
    """Guild weekly raid and Mythic+ tracker"""
    pass


@cli.command()
@click.option('--now', type=click.DateTime(formats=NOW_FORMATS), help='Pretend the current UTC time is this')
def reset(now):
    """Show the current weekly reset window"""
    now = resolve_now(now)
    current = get_reset_time(now)
    upcoming = get_next_reset_time(now)
    remaining = upcoming - now

    click.echo(f"Current reset:  {current.strftime('%A %Y-%m-%d %H:%M UTC')}")
    click.echo(f"Reset stamp:    {current.date().isoformat()}")
    click.echo(f"Next reset:     {upcoming.strftime('%A %Y-%m-%d %H:%M UTC')}")
    click.echo(f"Resets in:      {remaining.days}d {remaining.seconds // 3600}h")


@cli.command()
@click.option('--guild', default=None, help='Guild name (default from config)')
@click.option('--realm', default=None, help='Realm name (default from config)')
@click.option('--region', type=click.Choice(config.VALID_REGIONS), default=None, help='Region')
@click.option('--character', 'characters', multiple=True, help='Sync only this Name-Realm (repeatable)')
@click.option('--now', type=click.DateTime(formats=NOW_FORMATS), help='Pretend the current UTC time is this')
@click.option('--min-level', type=int, default=config.MIN_KEYSTONE_LEVEL, show_default=True,
              help='Keystone level counted for Mythic+ history')
@click.option('--offline', is_flag=True, help='Use cached API tokens regardless of expiry')
@click.option('--verbose', is_flag=True, help='Enable verbose logging')
def sync(guild, realm, region, characters, now, min_level, offline, verbose):
    """Fetch activity and update weekly progress for the roster"""
    setup_logging(log_level=logging.DEBUG if verbose else logging.INFO, data_dir=config.GUILD_DATA_DIR)

    if not characters:
        try:
            config.validate_config()
        except ValueError as e:
            click.echo(f"❌ Configuration error: {str(e)}")
            sys.exit(1)

    fetcher = WoWGuildFetcher.from_config(guild, realm, region)
    fetcher.offline_mode = offline
    store = WeeklyProgressStore(config.GUILD_DATA_DIR)

    try:
        if characters:
            members = []
            for value in characters:
                name, char_realm = parse_character_arg(value, fetcher.realm)
                members.append({'name': name, 'realm': char_realm})
        else:
            click.echo(f"👥 Retrieving roster for {fetcher.guild_name} on {fetcher.realm}-{fetcher.region}...")
            members = fetcher.get_roster_members(min_level=config.MAX_LEVEL)
    except (ValueError, ConnectionError, TimeoutError, requests.exceptions.RequestException) as e:
        click.echo(f"❌ {str(e)}")
        sys.exit(1)

    summary = sync_roster(fetcher, store, members, resolve_now(now),
                          zone_id=config.WCL_ZONE_ID, min_level=min_level)

    click.echo(f"✅ Synced {len(summary['synced'])} characters")
    if summary['failed']:
        click.echo(f"⚠️ Failed: {', '.join(summary['failed'])}")


@cli.command()
@click.option('--format', 'report_format', type=click.Choice(['csv', 'excel', 'all']), default='all',
              show_default=True, help='Report format to generate')
def report(report_format):
    """Export the weekly progress table"""
    generator = WeeklyReportGenerator(config.GUILD_DATA_DIR)

    if report_format == 'csv':
        generator.generate_csv_report()
    elif report_format == 'excel':
        generator.generate_excel_report()
    else:
        reports = generator.generate_all_reports()
        for kind, filename in reports.items():
            if filename is None:
                click.echo(f"❌ {kind} report could not be generated.")


@cli.command(name='config')
def show_config():
    """Print the active configuration"""
    config.print_config_info()


if __name__ == '__main__':
    cli()
