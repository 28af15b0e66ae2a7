"""Main entry point for the Fantasy Football Draft Assistant."""

import click
import pandas as pd

from draft_assistant import ProjectionQuery, ProjectionService
from draft_assistant.config.settings import get_settings
from draft_assistant.exceptions import DraftAssistantError, InvalidQueryError
from draft_assistant.models.projection_service import parse_seasons
from draft_assistant.utils.logging_config import setup_logging


@click.group()
@click.option('--log-level', default=None,
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
              help='Set logging level')
@click.option('--log-file', type=click.Path(), help='Log file path')
@click.pass_context
def cli(ctx, log_level, log_file):
    """Fantasy Football Draft Assistant CLI."""
    settings = get_settings()
    setup_logging(level=log_level or settings.log_level, log_file=log_file)
    ctx.ensure_object(dict)
    ctx.obj.setdefault('service', None)


def _service(ctx) -> ProjectionService:
    if ctx.obj.get('service') is None:
        ctx.obj['service'] = ProjectionService()
    return ctx.obj['service']


@cli.command()
@click.option('--scoring', '-s', default='ppr',
              type=click.Choice(['standard', 'ppr', 'half_ppr']),
              help='Fantasy scoring preset')
@click.option('--pass-td', default='4', type=click.Choice(['4', '6']),
              help='Points per passing touchdown')
@click.option('--position', '-p', default='ALL',
              type=click.Choice(['QB', 'RB', 'WR', 'TE', 'ALL'], case_sensitive=False),
              help='Position to rank (default: all)')
@click.option('--ids', help='Comma-separated player ids (overrides --position)')
@click.option('--exclude', help='Comma-separated player ids to leave out, e.g. drafted players')
@click.option('--limit', '-n', default=25, type=int, help='Number of players to show')
@click.option('--games', '-g', type=int, help='Rank by projected total over this many games')
@click.option('--seasons', help='Comma-separated seasons of history (default: last five)')
@click.option('--output', '-o', type=click.Path(),
              help='Output file path (CSV format)')
@click.pass_context
def projections(ctx, scoring, pass_td, position, ids, exclude, limit, games, seasons, output):
    """Rank players by projected points per game."""
    try:
        query = ProjectionQuery.from_params(
            preset=scoring,
            pass_td=int(pass_td),
            position=position,
            ids=ids,
            exclude=exclude,
            limit=limit,
            games=games,
            seasons=seasons,
        )
    except InvalidQueryError as e:
        raise click.UsageError(str(e))

    click.echo(f"Building {scoring.upper()} projections (pass TD = {pass_td})...")
    try:
        result = _service(ctx).get_projections(query)
    except DraftAssistantError as e:
        click.echo(f"Error generating projections: {e}", err=True)
        ctx.exit(1)

    if not result.players:
        click.echo("No projections generated.", err=True)
        return

    df = pd.DataFrame([row.model_dump() for row in result.players])
    if games:
        df['season_total'] = df['ppg'] * games

    click.echo(f"\nTop {len(df)} projections:")
    click.echo("=" * 60)
    for rank, row in enumerate(df.itertuples(index=False), start=1):
        line = f"{rank:3}. {row.full_name:24} {row.position:3} {row.team or 'FA':4} {row.ppg:6.2f} ppg"
        if games:
            line += f"  {row.season_total:7.1f} pts / {games} g"
        click.echo(line)

    if output:
        df.to_csv(output, index=False)
        click.echo(f"\nProjections saved to {output}")


@cli.command()
@click.option('--player-id', required=True, help='Sleeper player ID')
@click.option('--seasons', help='Comma-separated seasons (default: last five)')
@click.option('--output', '-o', type=click.Path(),
              help='Output file path (CSV format)')
@click.pass_context
def history(ctx, player_id, seasons, output):
    """Show a player's week-by-week stat history."""
    try:
        weeks = _service(ctx).get_player_weekly_history(player_id, parse_seasons(seasons))
    except InvalidQueryError as e:
        raise click.UsageError(str(e))

    if not weeks:
        click.echo(f"No weekly stats found for player {player_id}.", err=True)
        return

    df = pd.DataFrame([w.model_dump() for w in weeks])
    columns = ['season', 'week', 'pts_ppr', 'pass_yd', 'pass_td', 'rush_yd',
               'rush_td', 'rec', 'rec_yd', 'rec_td']
    click.echo(df[columns].to_string(index=False, na_rep='-'))

    if output:
        df.to_csv(output, index=False)
        click.echo(f"\nHistory saved to {output}")


@cli.command()
@click.argument('query')
@click.pass_context
def search(ctx, query):
    """Find players by name."""
    try:
        players = _service(ctx).search_players(query)
    except InvalidQueryError as e:
        raise click.UsageError(str(e))

    if not players:
        click.echo("No matching players.")
        return
    for player in players:
        click.echo(f"{player.player_id:>8}  {player.full_name:24} {player.position:3} {player.team or 'FA'}")


@cli.command()
@click.option('--host', default='127.0.0.1', help='Bind address')
@click.option('--port', default=8000, type=int, help='Port')
def serve(host, port):
    """Run the HTTP API."""
    import uvicorn
    from draft_assistant.api.app import create_app

    uvicorn.run(create_app(), host=host, port=port)


if __name__ == '__main__':
    cli()
