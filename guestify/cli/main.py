#!/usr/bin/env python3
"""
Guestify Tracker Terminal CLI
Command-line front end for the interview tracker: board, table, moves,
bulk edits, tags and portfolio.
"""

import logging
import click
from typing import List, Optional

from guestify.api.client import ApiError
from guestify.app import create_app, TrackerApp
from guestify.engine.bulk_edit import SOURCE_OPTIONS
from guestify.engine.views import VIEWS
from guestify.logging_config import configure_logging, log_call
from guestify.models import Appearance, PRIORITIES

PRIORITY_STARS = {'high': '★', 'medium': '⯪'}


def priority_star(priority: Optional[str]) -> str:
    return PRIORITY_STARS.get((priority or '').lower(), '☆')


def _start(load_tags: bool = False) -> TrackerApp:
    app = create_app()
    app.start(load_tags=load_tags)
    return app


def _report_error(app: TrackerApp):
    """Store-level errors are shown, not raised — the previous state is still valid."""
    if app.store.error:
        click.echo(f"Error: {app.store.error}", err=True)
        app.store.dismiss_error()


def _apply_filters(app: TrackerApp, search, status, priority, source, profile, tags, archived):
    store = app.store
    if archived:
        store.set_filter('show_archived', True)
    store.set_filter('search', search or '')
    store.set_filter('status', status or '')
    store.set_filter('priority', priority or '')
    store.set_filter('source', source or '')
    store.set_filter('guest_profile_id', profile)
    for tag_id in tags:
        app.tags.toggle_filter_tag(tag_id)


def _card_line(a: Appearance) -> str:
    line = f"  #{a.id:<5} {(a.podcast_name or 'Unknown Podcast')[:40]}"
    if a.episode_title:
        line += f" — {a.episode_title[:40]}"
    if a.source:
        line += f" [{a.source}]"
    return line


def filter_options(func):
    """Shared filter flags for board and table."""
    options = [
        click.option('--search', help='Match podcast name or episode title'),
        click.option('--status', help='Stage key (potential, active, ...)'),
        click.option('--priority', type=click.Choice(PRIORITIES), help='Priority'),
        click.option('--source', help='Exact source'),
        click.option('--profile', type=int, help='Guest profile ID'),
        click.option('--tag', 'tags', type=int, multiple=True, help='Tag ID (repeatable, any match)'),
        click.option('--archived', is_flag=True, help='Include archived appearances'),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              help='Log file level (default: LOG_LEVEL env var, else INFO)')
def cli(log_level):
    """Guestify - Podcast Guest Interview Tracker"""
    configure_logging(log_level)


# =============================================================================
# PIPELINE
# =============================================================================

@cli.command('stages')
@log_call
def stages():
    """List pipeline stages by row"""
    app = create_app()
    app.stages.load()

    if app.stages.used_fallback:
        click.echo("(server unreachable — showing default stages)", err=True)

    for row in (1, 2):
        click.echo(f"\nRow {row}:")
        for stage in app.stages.columns_for_row(row):
            click.echo(f"  {stage.key:<15} {stage.label:<20} {stage.color}")

    click.echo(f"\nCustom stages: {'yes' if app.stages.is_custom else 'no'}")


@cli.command('board')
@filter_options
@log_call
def board(search, status, priority, source, profile, tags, archived):
    """Show the Kanban board"""
    app = _start(load_tags=bool(tags))
    _apply_filters(app, search, status, priority, source, profile, tags, archived)
    _report_error(app)

    grouped = app.store.grouped_by_stage()
    for row in (1, 2):
        click.echo(f"\n{'=' * 80}")
        for stage in app.stages.columns_for_row(row):
            cards = grouped.get(stage.key, [])
            click.echo(f"\n{stage.label.upper()} — Total: {len(cards)}")
            click.echo("-" * 40)
            for a in cards:
                click.echo(_card_line(a))

    missing = app.store.unrecognized()
    if missing:
        ids = ', '.join(f"#{a.id}" for a in missing)
        click.echo(f"\nWarning: {len(missing)} appearance(s) have an unknown stage and are not shown: {ids}", err=True)
    click.echo()


@cli.command('table')
@filter_options
@log_call
def table(search, status, priority, source, profile, tags, archived):
    """Show appearances as a table"""
    app = _start(load_tags=bool(tags))
    _apply_filters(app, search, status, priority, source, profile, tags, archived)
    _report_error(app)

    rows = app.store.filtered()
    if not rows:
        click.echo("No appearances found.")
        return

    click.echo(f"\nFound {len(rows)} appearances:\n")
    click.echo(f"{'ID':<6} {'Pri':<4} {'Podcast':<30} {'Status':<14} {'Source':<20} {'Updated':<12}")
    click.echo("-" * 90)
    for a in rows:
        click.echo(
            f"{a.id:<6} {priority_star(a.priority):<4} {(a.podcast_name or 'Unknown')[:28]:<30} "
            f"{app.stages.label_for(a.status)[:12]:<14} {(a.source or '-')[:18]:<20} "
            f"{(a.updated_at or '-')[:10]:<12}"
        )


@cli.command('move')
@click.argument('appearance_id', type=int)
@click.argument('stage')
@log_call
def move(appearance_id, stage):
    """Move an appearance to another stage"""
    logger = logging.getLogger("guestify")
    app = _start()
    _report_error(app)

    appearance = app.store.get(appearance_id)
    if appearance is None:
        logger.warning(f"move | appearance_id={appearance_id} not found")
        click.echo(f"Appearance ID {appearance_id} not found.", err=True)
        return

    if not app.stages.is_known(stage):
        raise click.BadParameter(
            f"unknown stage '{stage}'. Choose from: {', '.join(app.stages.keys())}",
            param_hint="'STAGE'",
        )

    old_label = app.stages.label_for(appearance.status)
    drag = app.dragdrop
    drag.pointer_down(appearance_id)
    payload = drag.start_drag(appearance_id)
    drag.drag_enter(stage)
    ok = drag.drop(stage, payload)
    drag.end_drag()

    if ok:
        click.echo(f"✓ #{appearance_id} {appearance.podcast_name}: {old_label} → {app.stages.label_for(stage)}")
    else:
        click.echo(
            f"✗ Could not move #{appearance_id}: {app.store.error or 'unknown error'} "
            f"(still in {app.stages.label_for(appearance.status)})",
            err=True,
        )
        app.store.dismiss_error()


@cli.command('bulk')
@click.argument('appearance_ids', type=int, nargs=-1, required=True)
@click.option('--status', help='New stage key')
@click.option('--priority', type=click.Choice(PRIORITIES), help='New priority')
@click.option('--source', type=click.Choice(SOURCE_OPTIONS), help='New source')
@click.option('--profile', type=int, help='New guest profile ID')
@click.option('--archive/--unarchive', default=None, help='Archive or unarchive')
@log_call
def bulk(appearance_ids, status, priority, source, profile, archive):
    """Edit several appearances at once"""
    app = _start()
    _report_error(app)
    store = app.store

    missing: List[int] = []
    for appearance_id in dict.fromkeys(appearance_ids):
        if store.get(appearance_id) is None:
            missing.append(appearance_id)
        elif not store.is_selected(appearance_id):
            store.toggle_selection(appearance_id)

    if missing:
        click.echo(f"Skipping unknown IDs: {', '.join(str(i) for i in missing)}", err=True)
    if not store.selected_ids:
        click.echo("Nothing to update.")
        return

    session = app.bulk_edit
    session.open()
    try:
        session.set_status(status)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="'--status'")
    session.set_priority(priority)
    session.set_source(source)
    session.set_guest_profile(profile)
    if archive is not None:
        session.set_archive(archive)

    count = len(store.selected_ids)
    patch = session.build_patch()
    if not patch:
        session.cancel()
        click.echo("No changes given — nothing sent.")
        return

    if session.apply():
        click.echo(f"✓ Updated {count} appearances: {', '.join(sorted(patch))}")
    else:
        click.echo(f"✗ Bulk update failed: {store.error or 'unknown error'}", err=True)
        store.dismiss_error()


# =============================================================================
# TAGS / VIEWS / PORTFOLIO
# =============================================================================

@cli.command('tags')
@log_call
def tags():
    """List tags"""
    app = create_app()
    available = app.tags.fetch_available()

    if app.tags.error:
        click.echo(f"Error: {app.tags.error}", err=True)
    if not available:
        click.echo("No tags found.")
        return

    click.echo(f"\n{'ID':<6} {'Name':<30} {'Color':<10} {'Used':>5}")
    click.echo("-" * 55)
    for tag in available:
        click.echo(f"{tag.id:<6} {tag.name[:28]:<30} {tag.color or '':<10} {tag.usage_count:>5}")


@cli.command('view')
@click.argument('name', required=False, type=click.Choice(VIEWS))
@log_call
def view(name):
    """Show or change the default view"""
    app = create_app()
    if name is None:
        current = app.views.restore(app.initial_view)
        click.echo(f"Current view: {current}")
        return

    app.views.set_view(name)
    click.echo(f"✓ View set to {name}")
    if app.portfolio.error:
        click.echo(f"Error: {app.portfolio.error}", err=True)


@cli.command('portfolio')
@click.option('--search', default='', help='Search episode or podcast')
@click.option('--page', default=1, help='Page number (default: 1)')
@click.option('--all', 'fetch_all', is_flag=True, help='Fetch every page')
@log_call
def portfolio(search, page, fetch_all):
    """List past appearances"""
    app = create_app()
    plist = app.portfolio
    plist.filters.search = search

    if fetch_all:
        try:
            items = plist.fetch_all(progress=True)
        except ApiError as e:
            click.echo(f"Error: {e.message}", err=True)
            return
        footer = f"{len(items)} appearances"
    else:
        if not plist.fetch(page):
            click.echo(f"Error: {plist.error}", err=True)
            return
        items = plist.items
        footer = f"Page {plist.filters.page} of {max(plist.pages, 1)} — {plist.total} total"

    if not items:
        click.echo("No portfolio appearances found.")
        return

    click.echo(f"\n{'Date':<12} {'Podcast':<30} {'Episode':<40}")
    click.echo("-" * 84)
    for item in items:
        click.echo(
            f"{(item.engagement_date or '-')[:10]:<12} {(item.podcast_name or '-')[:28]:<30} "
            f"{(item.episode_title or '')[:40]:<40}"
        )
    click.echo(f"\n{footer}")


if __name__ == '__main__':
    cli()
