#!/usr/bin/env python3
"""Main entry point for the Sleeper league dashboard"""
import sys
from datetime import datetime
from typing import List, Optional

import click
from rich.console import Console
from rich.table import Table

# Set up production logging first
from src.utils.logging import setup_logging, get_logger

from src.core.models import (
    DraftAnalysis, League, LeagueStatus, PlayerValue, TeamSummary, TeamValuation, UnmatchedPlayer
)
from src.core.sheet_parser import SheetLayout, SheetParseError, records_by_position
from src.core.matcher import unmatched_players
from src.core.draft_analyzer import analyze_draft
from src.core.team_tiers import build_team_valuations
from src.core.season import process_teams, process_player_values
from src.sleeper import SleeperClient, SleeperAPIError, identities_from_players
from src.sheets import GoogleSheetsSource, SheetSourceError, load_rankings
from src.exporters import CSVExporter
from src.utils.cache import OptimizedCache, list_namespaces
from src.utils.validation import InputValidator, ValidationError
from src.utils.monitoring import monitor
from config import DATA_DIR, DEFAULT_SETTINGS, MAX_WEEKS, SHEET_FILE, SHEET_LAYOUT, STARTER_REQUIREMENTS

# Rich console for pretty output
console = Console()

KNOWN_ERRORS = (ValidationError, SleeperAPIError, SheetParseError, SheetSourceError)


@click.group()
@click.version_option(version='0.1.0')
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, debug):
    """Sleeper League Dashboard - draft grades, team tiers and season analytics

    Commands:
      draft-analysis   - Value and reach of every draft pick
      team-tiers       - Position tier scores for every team
      season-overview  - Power rankings, luck and lineup decisions
      player-values    - VORP / VORS / VOBP for rostered players
      unmatched        - Drafted players missing from the ranking sheet
      parse-sheet      - Check what the parser reads from a ranking sheet
      cache            - View or clear cached Sleeper data
      metrics          - View performance metrics

    Quick Start:
      python main.py draft-analysis --league-id 1234567890 --sheet data/rankings.csv
    """
    log_file = None
    if debug:
        log_file = DATA_DIR / 'logs' / f'debug_{datetime.now().strftime("%Y%m%d_%H%M%S")}.log'

    setup_logging(debug=debug, log_file=log_file)
    ctx.ensure_object(dict)
    ctx.obj['debug'] = debug
    ctx.call_on_close(monitor.save_latest)


def league_option(func):
    return click.option('--league-id', required=True, help='Sleeper league ID')(func)


def sheet_options(func):
    func = click.option('--teams-per-round', type=int, default=None,
                        help='Picks per round used to convert "3.03" style ADP')(func)
    func = click.option('--worksheet', default=None, help='Worksheet name in the Google Sheet')(func)
    func = click.option('--google-sheet', default=None, help='Google Sheet key to read rankings from')(func)
    func = click.option('--sheet', default=SHEET_FILE, show_default=True,
                        help='Path to the ranking sheet CSV export')(func)
    return func


def fail(message: str):
    console.print(f"[red]Error: {message}[/red]")
    sys.exit(1)


def load_sheet(sheet: str, google_sheet: Optional[str], worksheet: Optional[str],
               teams_per_round: Optional[int]):
    """Read and parse the ranking sheet from a file or Google Sheets"""
    if teams_per_round is not None:
        teams_per_round = InputValidator.validate_teams_per_round(teams_per_round)
    layout = SheetLayout.from_config(SHEET_LAYOUT, teams_per_round)

    with console.status("[yellow]• Loading ranking sheet...[/yellow]"):
        if google_sheet:
            rows = GoogleSheetsSource(google_sheet, worksheet).fetch_rows()
            records = load_rankings(rows=rows, layout=layout)
        else:
            records = load_rankings(path=sheet, layout=layout)

    console.print(f"[green]✓[/green] Ranking sheet: {len(records)} players")
    return records


def parse_starters(text: Optional[str]) -> Optional[dict]:
    """Turn "QB=1,WR=3" into starter counts laid over the configured defaults"""
    if not text:
        return None

    requirements = {}
    for item in text.split(','):
        position, sep, count = item.partition('=')
        if not sep or not count.strip().isdigit():
            raise ValidationError(f"Invalid starter requirement: {item.strip()} (expected POS=COUNT)")
        requirements[position.strip()] = int(count)

    return dict(STARTER_REQUIREMENTS, **InputValidator.validate_starter_requirements(requirements))


def weeks_played(client: SleeperClient, league: League) -> int:
    """Weeks to fetch when none are given: up to the current NFL week while the season runs"""
    if league.status == LeagueStatus.COMPLETE:
        return MAX_WEEKS

    try:
        state = client.get_nfl_state()
    except SleeperAPIError as e:
        get_logger(__name__).warning(f"Could not read NFL state, using all weeks: {e}")
        return MAX_WEEKS

    if str(state.get('season')) != league.season:
        return MAX_WEEKS
    week = int(state.get('week') or 0)
    return min(max(week, 1), MAX_WEEKS)


def load_identities(client: SleeperClient, force_refresh: bool):
    with console.status("[yellow]• Fetching Sleeper player directory...[/yellow]"):
        players = client.get_players(force_refresh=force_refresh)
    identities = identities_from_players(players)
    console.print(f"[green]✓[/green] Sleeper players: {len(identities)}")
    return identities


def run_draft_analysis(client: SleeperClient, league_id: str, records, identities) -> DraftAnalysis:
    with console.status("[yellow]• Fetching draft...[/yellow]"):
        league = client.get_league(league_id)
        users = client.get_users(league_id)
        draft_id = client.get_latest_draft_id(league_id)
        picks = client.get_draft_picks(draft_id)
    console.print(f"[green]✓[/green] {league.name}: {len(picks)} picks")
    return analyze_draft(league, draft_id, picks, users, identities, records)


@cli.command('draft-analysis')
@league_option
@sheet_options
@click.option('--force-refresh', is_flag=True, help='Ignore the cached Sleeper player directory')
@click.option('--export/--no-export', default=True, help='Write CSV exports')
@click.pass_context
def draft_analysis(ctx, league_id, sheet, google_sheet, worksheet, teams_per_round,
                   force_refresh, export):
    """Grade every pick of the league's draft against expert ADP"""
    logger = get_logger(__name__)
    try:
        league_id = InputValidator.validate_league_id(league_id)
        records = load_sheet(sheet, google_sheet, worksheet, teams_per_round)
        client = SleeperClient()
        identities = load_identities(client, force_refresh)
        analysis = run_draft_analysis(client, league_id, records, identities)
    except KNOWN_ERRORS as e:
        logger.debug(f"Draft analysis failed: {e}")
        fail(str(e))

    display_draft_summary(analysis)
    display_position_summary(analysis)

    if export:
        files = CSVExporter().export_draft_analysis(analysis)
        console.print(f"\n[green]✓[/green] Exported {len(files)} files to: [cyan]data/output/latest/[/cyan]")

    if ctx.obj.get('debug'):
        monitor.log_summary()


@cli.command('team-tiers')
@league_option
@sheet_options
@click.option('--starters', default=None,
              help='Starters per position for tier weighting, e.g. "QB=1,RB=2,WR=3"')
@click.option('--force-refresh', is_flag=True, help='Ignore the cached Sleeper player directory')
@click.option('--export/--no-export', default=True, help='Write CSV exports')
@click.pass_context
def team_tiers(ctx, league_id, starters, sheet, google_sheet, worksheet, teams_per_round,
               force_refresh, export):
    """Score each team's position groups by expert tier (lower is better)"""
    logger = get_logger(__name__)
    try:
        league_id = InputValidator.validate_league_id(league_id)
        starter_requirements = parse_starters(starters)
        records = load_sheet(sheet, google_sheet, worksheet, teams_per_round)
        client = SleeperClient()
        identities = load_identities(client, force_refresh)

        try:
            pick_valuations = run_draft_analysis(client, league_id, records, identities).all_picks
        except SleeperAPIError as e:
            logger.warning(f"No draft data, using rosters only: {e}")
            pick_valuations = []

        with console.status("[yellow]• Scoring rosters...[/yellow]"):
            rosters = client.get_rosters(league_id)
            users = client.get_users(league_id)
            teams = build_team_valuations(rosters, users, identities, records, pick_valuations,
                                          starter_requirements=starter_requirements)
    except KNOWN_ERRORS as e:
        logger.debug(f"Team tiers failed: {e}")
        fail(str(e))

    display_team_tiers(teams)

    if export and teams:
        CSVExporter().export_team_tiers(teams)
        console.print("\n[green]✓[/green] Exported to: [cyan]data/output/latest/team_tiers.csv[/cyan]")

    if ctx.obj.get('debug'):
        monitor.log_summary()


@cli.command('season-overview')
@league_option
@click.option('--weeks', type=int, default=None,
              help='Weeks to include (default: weeks played so far this season)')
@click.option('--projections/--no-projections', default=True,
              help='Fetch weekly projections for self-inflicted losses')
@click.option('--force-refresh', is_flag=True, help='Ignore the cached Sleeper player directory')
@click.option('--export/--no-export', default=True, help='Write CSV exports')
@click.pass_context
def season_overview(ctx, league_id, weeks, projections, force_refresh, export):
    """Power rankings against standings, with lineup and luck metrics"""
    logger = get_logger(__name__)
    try:
        league_id = InputValidator.validate_league_id(league_id)
        if weeks is not None:
            weeks = InputValidator.validate_week(weeks)
        client = SleeperClient()

        with console.status("[yellow]• Fetching league and matchups...[/yellow]"):
            league = client.get_league(league_id)
            if weeks is None:
                weeks = weeks_played(client, league)
            rosters = client.get_rosters(league_id)
            users = client.get_users(league_id)
            matchups = client.get_all_matchups(league_id, max_weeks=weeks)
        console.print(f"[green]✓[/green] {league.name}: {len(matchups)} weeks of matchups")

        identities = load_identities(client, force_refresh)

        projections_by_week = None
        if projections and matchups:
            with console.status("[yellow]• Fetching projections...[/yellow]"):
                projections_by_week = client.get_projections_by_week(league.season, sorted(matchups))

        teams = process_teams(rosters, users, matchups, identities, projections_by_week)
    except KNOWN_ERRORS as e:
        logger.debug(f"Season overview failed: {e}")
        fail(str(e))

    display_season_overview(teams)

    if export and teams:
        CSVExporter().export_season_overview(teams)
        console.print("\n[green]✓[/green] Exported to: [cyan]data/output/latest/season_overview.csv[/cyan]")

    if ctx.obj.get('debug'):
        monitor.log_summary()


@cli.command('player-values')
@league_option
@click.option('--position', default=None, help='Only show one position')
@click.option('--limit', type=int, default=15, show_default=True, help='Players shown per position')
@click.option('--force-refresh', is_flag=True, help='Ignore the cached Sleeper player directory')
@click.option('--export/--no-export', default=True, help='Write CSV exports')
def player_values(league_id, position, limit, force_refresh, export):
    """VORP, VORS and VOBP for every rostered player"""
    logger = get_logger(__name__)
    try:
        league_id = InputValidator.validate_league_id(league_id)
        if position:
            position = InputValidator.validate_position(position)
        client = SleeperClient()

        with console.status("[yellow]• Fetching rosters and stats...[/yellow]"):
            league = client.get_league(league_id)
            rosters = client.get_rosters(league_id)
            users = client.get_users(league_id)
            stats = client.get_season_stats(league.season)
        identities = load_identities(client, force_refresh)

        teams = league.total_rosters or DEFAULT_SETTINGS["teams"]
        values = process_player_values(rosters, users, identities, stats, teams=teams)
    except KNOWN_ERRORS as e:
        logger.debug(f"Player values failed: {e}")
        fail(str(e))

    if stats is None:
        console.print("[yellow]○[/yellow] Season stats unavailable, values are zero")

    display_player_values(values, position, limit)

    if export and values:
        CSVExporter().export_player_values(values)
        console.print("\n[green]✓[/green] Exported to: [cyan]data/output/latest/player_values.csv[/cyan]")


@cli.command()
@league_option
@sheet_options
@click.option('--force-refresh', is_flag=True, help='Ignore the cached Sleeper player directory')
@click.option('--export/--no-export', default=False, help='Write CSV export')
def unmatched(league_id, sheet, google_sheet, worksheet, teams_per_round, force_refresh, export):
    """List drafted players that could not be found in the ranking sheet"""
    logger = get_logger(__name__)
    try:
        league_id = InputValidator.validate_league_id(league_id)
        records = load_sheet(sheet, google_sheet, worksheet, teams_per_round)
        client = SleeperClient()
        identities = load_identities(client, force_refresh)
        picks = client.get_draft_picks(client.get_latest_draft_id(league_id))
        players = unmatched_players(picks, identities, records)
    except KNOWN_ERRORS as e:
        logger.debug(f"Unmatched lookup failed: {e}")
        fail(str(e))

    display_unmatched(players, len(picks))

    if export and players:
        CSVExporter().export_unmatched(players)
        console.print("\n[green]✓[/green] Exported to: [cyan]data/output/latest/unmatched_players.csv[/cyan]")


@cli.command('parse-sheet')
@sheet_options
@click.option('--position', default=None, help='Only show one position')
@click.option('--limit', type=int, default=10, show_default=True, help='Players shown')
def parse_sheet_command(sheet, google_sheet, worksheet, teams_per_round, position, limit):
    """Show what the parser reads from a ranking sheet"""
    try:
        records = load_sheet(sheet, google_sheet, worksheet, teams_per_round)
        if position:
            position = InputValidator.validate_position(position)
    except KNOWN_ERRORS as e:
        fail(str(e))

    counts = records_by_position(records)
    console.print("\n[bold]Players per position:[/bold] " +
                  ", ".join(f"{pos} {count}" for pos, count in counts.items()))

    shown = [r for r in records if not position or r.position.value == position][:limit]
    table = Table(title=f"\n[bold]First {len(shown)} records[/bold]")
    table.add_column("Player", style="magenta")
    table.add_column("Pos", style="green")
    table.add_column("Team/Bye", style="yellow")
    table.add_column("ECR", justify="right")
    table.add_column("Tier", style="blue")
    table.add_column("ADP", justify="right", style="cyan")
    table.add_column("VAL", justify="right")

    for record in shown:
        table.add_row(
            record.name,
            record.position.value,
            record.team_and_bye_week,
            str(record.expert_consensus_rank or "-"),
            record.position_tier,
            f"{record.average_draft_position:.0f}" if record.has_adp else "-",
            f"{record.val:.1f}",
        )
    console.print(table)


@cli.command()
@click.option('--clear', is_flag=True, help='Clear cached data')
@click.option('--namespace', help='Only this cache namespace')
def cache(clear: bool, namespace: str):
    """Manage and view cache statistics"""
    namespaces = [namespace] if namespace else list_namespaces()

    if clear:
        total = 0
        for name in namespaces:
            count = OptimizedCache(name).clear()
            total += count
            console.print(f"[green]✓[/green] Cleared {count} entries from {name} cache")
        console.print(f"\n[bold green]Total: {total} cache entries cleared[/bold green]")
        return

    infos = [OptimizedCache(name).info() for name in namespaces]
    infos = [info for info in infos if info['entries']]
    if not infos:
        console.print("[dim]No cache data found[/dim]")
        return

    table = Table(title="Cache")
    table.add_column("Namespace", style="cyan")
    table.add_column("Entries", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("Updated")
    for info in infos:
        table.add_row(
            info['namespace'],
            str(info['entries']),
            f"{info['size_mb']:.2f} MB",
            info['newest'] or "-",
        )
    console.print(table)
    console.print("\n[dim]Tip: Use --clear to clear all cache data[/dim]")


@cli.command()
@click.option('--export', is_flag=True, help='Export metrics to JSON file')
@click.option('--clear', is_flag=True, help='Clear all metrics data')
def metrics(export: bool, clear: bool):
    """View performance metrics and monitoring data"""
    if clear:
        monitor.clear_metrics()
        console.print("[green]✓[/green] Metrics cleared")
        return

    summary = monitor.get_performance_summary()
    if not summary:
        summary = monitor.load_latest_summary()
        if summary:
            console.print("[dim]Showing metrics saved by the last command[/dim]")
    if not summary:
        console.print("[dim]No metrics recorded yet. Run some commands first![/dim]")
        return

    table = Table(title="Operation Performance")
    table.add_column("Operation", style="cyan")
    table.add_column("Count", justify="right")
    table.add_column("Errors", justify="right", style="red")
    table.add_column("Avg Time", justify="right")
    table.add_column("Max Time", justify="right")
    table.add_column("Peak Memory", justify="right")

    for name, stats in sorted(summary.items()):
        table.add_row(
            name,
            str(stats['count']),
            str(stats['errors']),
            f"{stats['avg_duration']:.3f}s",
            f"{stats['max_duration']:.3f}s",
            f"{stats['peak_rss_mb']:.1f}MB",
        )
    console.print(table)

    if export:
        filepath = monitor.export_metrics()
        console.print(f"\n[green]✓[/green] Metrics exported to: {filepath}")


def display_draft_summary(analysis: DraftAnalysis):
    efficiency = analysis.efficiency
    console.print(f"\n[bold]{analysis.league_name}[/bold] draft ({analysis.total_picks} picks)")
    if analysis.match_stats:
        stats = analysis.match_stats
        console.print(f"  Matched to sheet: {stats.matched_picks}/{stats.total_picks} ({stats.match_rate:.1f}%)")
    console.print(f"  Value picks: [green]{efficiency.total_value_picks}[/green]  "
                  f"Reaches: [red]{efficiency.total_reaches}[/red]  "
                  f"Average reach: {efficiency.average_reach:+.1f}")
    if efficiency.best_value_pick:
        best = efficiency.best_value_pick
        console.print(f"  Best value: {best.player_name} ({best.team_name}) {best.reach:+.1f}")
    if efficiency.worst_reach:
        worst = efficiency.worst_reach
        console.print(f"  Worst reach: {worst.player_name} ({worst.team_name}) {worst.reach:+.1f}")


def display_position_summary(analysis: DraftAnalysis):
    table = Table(title="\n[bold]Reach by Position[/bold]")
    table.add_column("Pos", style="green")
    table.add_column("Picks", justify="right")
    table.add_column("Avg Reach", justify="right")
    table.add_column("Values", justify="right", style="bright_green")
    table.add_column("Reaches", justify="right", style="red")
    table.add_column("Best Value", style="magenta")
    table.add_column("Worst Reach", style="yellow")

    for summary in analysis.position_analysis:
        table.add_row(
            summary.position,
            str(summary.total_picks),
            f"{summary.average_reach:+.1f}",
            str(summary.value_picks),
            str(summary.reach_picks),
            f"{summary.best_value.player_name} ({summary.best_value.reach:+.0f})" if summary.best_value else "-",
            f"{summary.worst_reach.player_name} ({summary.worst_reach.reach:+.0f})" if summary.worst_reach else "-",
        )
    console.print(table)


def display_team_tiers(teams: List[TeamValuation]):
    table = Table(title="\n[bold]Team Tiers[/bold] (lower is better)")
    table.add_column("Rank", style="cyan", no_wrap=True)
    table.add_column("Team", style="magenta")
    table.add_column("Overall", justify="right", style="bold")
    for position in ['QB', 'RB', 'WR', 'TE', 'K', 'DEF']:
        table.add_column(position, justify="right")

    def cell(value: Optional[float]) -> str:
        return "-" if value is None else f"{value:.1f}"

    for team in teams:
        table.add_row(
            str(team.rank),
            team.team_name,
            cell(team.overall_score),
            *[cell(team.position_tiers[p].average_tier) for p in ['QB', 'RB', 'WR', 'TE', 'K', 'DEF']]
        )
    console.print(table)


def display_season_overview(teams: List[TeamSummary]):
    table = Table(title="\n[bold]Season Overview[/bold]")
    table.add_column("Power", style="cyan", justify="right")
    table.add_column("Standing", justify="right")
    table.add_column("Owner", style="magenta")
    table.add_column("Record")
    table.add_column("PF", justify="right")
    table.add_column("PA", justify="right")
    table.add_column("Self-Inflicted", justify="right", style="red")
    table.add_column("Potential W", justify="right", style="yellow")
    table.add_column("Bench Pts", justify="right")
    table.add_column("Luck", justify="right", style="blue")

    for team in teams:
        record = f"{team.wins}-{team.losses}" + (f"-{team.ties}" if team.ties else "")
        table.add_row(
            str(team.power_rank),
            str(team.sleeper_rank),
            team.owner,
            record,
            f"{team.actual_points:.1f}",
            f"{team.opponent_points:.1f}",
            str(team.self_inflicted_losses),
            str(team.potential_wins),
            f"{team.points_left_on_bench:.1f}",
            f"{team.luck_rating:+.2f}",
        )
    console.print(table)


def display_player_values(values: List[PlayerValue], position: Optional[str], limit: int):
    positions = [position] if position else ['QB', 'RB', 'WR', 'TE', 'K', 'DEF']
    for pos in positions:
        players = sorted((v for v in values if v.position == pos), key=lambda v: v.rank)[:limit]
        if not players:
            continue
        table = Table(title=f"\n[bold]{pos}[/bold]")
        table.add_column("Rank", style="cyan", justify="right")
        table.add_column("Player", style="magenta")
        table.add_column("Owner")
        table.add_column("Pts", justify="right")
        table.add_column("PPG", justify="right")
        table.add_column("VORP", justify="right", style="bright_green")
        table.add_column("VORS", justify="right")
        table.add_column("VOBP", justify="right")
        for v in players:
            table.add_row(
                str(v.rank), v.name, v.owner, f"{v.points:.1f}", f"{v.points_per_game:.1f}",
                f"{v.vorp:+.1f}", f"{v.vors:+.1f}", f"{v.vobp:+.1f}"
            )
        console.print(table)


def display_unmatched(players: List[UnmatchedPlayer], total_picks: int):
    if not players:
        console.print(f"\n[green]✓[/green] All {total_picks} drafted players matched the ranking sheet")
        return

    table = Table(title=f"\n[bold]{len(players)} of {total_picks} drafted players not in sheet[/bold]")
    table.add_column("Player", style="magenta")
    table.add_column("Pos", style="green")
    table.add_column("Team", style="yellow")
    table.add_column("Closest sheet name", style="cyan")
    table.add_column("Score", justify="right")
    for player in players:
        table.add_row(
            player.player_name, player.position, player.team,
            player.suggestion or "-", str(player.suggestion_score or "-")
        )
    console.print(table)


if __name__ == '__main__':
    cli()
