import random
import sys
from pathlib import Path

import click

from colored_names import __version__
from colored_names.commands import ChangeColorCommand, ColoredPlayerNamesCommand
from colored_names.config.palette import ConfigError, normalize_document, parse_palette
from colored_names.config.settings import get_settings
from colored_names.config.store import ConfigStore, serialize_document
from colored_names.log_config import configure_logging, get_logger
from colored_names.service.color_engine import ColorEngine
from colored_names.service.presence import InMemoryPresence
from colored_names.service.scoreboard import InMemoryScoreboard
from colored_names.service.types import Participant

logger = get_logger("cli")


def _default_config_path() -> Path:
    return get_settings().storage.config_path


@click.group()
@click.version_option(__version__, prog_name="colored-names")
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging.')
def cli(verbose):
    """Colored player names engine tools."""
    configure_logging(verbose or None)


@cli.command('check-config')
@click.argument('path', type=click.Path(dir_okay=False, path_type=Path), required=False)
@click.option('--write', is_flag=True, help='Save the normalized document back to PATH.')
def check_config(path, write):
    """Validate a palette document and print the resulting palette."""
    store = ConfigStore(path or _default_config_path())
    try:
        document = normalize_document(store.read())
        palette = parse_palette(document)
    except ConfigError as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        sys.exit(1)

    click.echo(f"Colors ({palette.size}): {', '.join(c.name for c in palette.colors)}")
    click.echo(f"Team sync: {'on' if palette.scoreboard else 'off'}")
    click.echo(f"Auto-update: {'on' if palette.auto_update else 'off'}")
    click.echo(f"Collision policy: {palette.collision_policy}")

    if write:
        changed = store.persist(document)
        click.echo(f"{'Normalized' if changed else 'Already normalized'}: {store.path}")
    elif serialize_document(document) != store.path.read_text(encoding="utf-8"):
        click.echo("Document is not normalized; run with --write to rewrite it")


@cli.command('simulate')
@click.option('--players', '-n', default=8, type=click.IntRange(min=0), help='Players to join.')
@click.option('--config', 'config_path', type=click.Path(dir_okay=False, path_type=Path), default=None,
              help='Palette document (created with defaults if missing).')
@click.option('--seed', type=int, default=None, help='Random seed.')
@click.option('--reroll', multiple=True, help='Player name to re-roll after joining.')
@click.option('--reload', 'do_reload', is_flag=True, help='Reload once after everyone joined.')
def simulate(players, config_path, seed, reroll, do_reload):
    """Join players into an in-memory server and print the resulting teams."""
    settings = get_settings()
    presence = InMemoryPresence()
    scoreboard = InMemoryScoreboard()
    if seed is None:
        seed = settings.engine.random_seed
    engine = ColorEngine(
        presence=presence,
        store=ConfigStore(config_path or settings.storage.config_path),
        scoreboard=scoreboard,
        team_prefix=settings.teams.team_prefix,
        rng=random.Random(seed),
        logger=logger,
    )

    try:
        engine.enable()
    except ConfigError as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        sys.exit(1)

    for i in range(1, players + 1):
        participant = Participant(id=f"player-{i:03d}", name=f"Player{i}")
        presence.join(participant)
        engine.on_join(participant)

    change_color = ChangeColorCommand(engine)
    for name in reroll:
        result = change_color.execute(None, [name])
        click.echo(" ".join(result.messages))

    if do_reload:
        result = ColoredPlayerNamesCommand(engine).execute(None, ["reload"])
        click.echo(" ".join(result.messages))

    teams = engine.teams()
    for label in sorted(teams):
        names = sorted(presence.get_participant(pid).display for pid in teams[label])
        click.echo(f"{label}: {', '.join(names)}")
    if not teams:
        for participant in presence.online_participants():
            color = engine.color_of(participant.id)
            click.echo(f"{participant.display}: {color.name if color else '-'}")

    engine.disable()


if __name__ == '__main__':
    cli()
