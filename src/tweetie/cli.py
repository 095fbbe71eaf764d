"""Typer CLI for tweetie workflows."""

from __future__ import annotations

from functools import partial
import json

import typer

from . import __version__
from .account import TwitterAccount
from .api import ApiFactory, TwitterAPI
from .config import (
    RuntimeConfig,
    config_to_dict,
    init_default_config,
    load_runtime_config,
    resolve_config_path,
)
from .console import ConsoleNoticeHost
from .errors import BindingError, ConfigError, SchedulerError, StoreError
from .logging import configure_logging
from .models import ListIdentifier
from .reactive import Disposable
from .render import render_change, render_json, render_pretty
from .scheduler import FetchLoopResult, run_fetch_loop
from .store import CollectionChange, TweetCollection, open_store
from .viewmodels import ListTimelineViewModel

app = typer.Typer(help="List timeline mirror with dismissable console notices.")

config_app = typer.Typer(help="Config commands.")
timeline_app = typer.Typer(help="List timeline commands.")

app.add_typer(config_app, name="config")
app.add_typer(timeline_app, name="timeline")

_PATH_HELP = "Optional config TOML path (defaults to platform config dir)."


@config_app.command("init")
def config_init(
    path: str | None = typer.Option(None, "--path", help=_PATH_HELP),
    force: bool = typer.Option(False, "--force", help="Overwrite existing config file."),
) -> None:
    try:
        written_path = init_default_config(path, force=force)
    except ConfigError as exc:
        typer.secho(f"Config init failed: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(2) from exc

    typer.echo(f"Wrote default config to {written_path}")


@config_app.command("show")
def config_show(
    path: str | None = typer.Option(None, "--path", help=_PATH_HELP),
    as_json: bool = typer.Option(False, "--json", help="Render resolved config as JSON."),
) -> None:
    resolved_path = resolve_config_path(path)
    config = _load_config_or_exit(path, action="Config show")

    payload = {
        "path": str(resolved_path),
        "config": config_to_dict(config),
    }
    if as_json:
        typer.echo(json.dumps(payload, indent=2, sort_keys=True))
        return

    typer.echo(f"Resolved config path: {payload['path']}")
    typer.echo(f"Store path: {config.store.path}")
    typer.echo(f"Default list: {config.app.default_list or '-'}")
    typer.echo(f"Fetch interval: {config.fetcher.interval_seconds}s")


@timeline_app.command("watch")
def timeline_watch(
    list_name: str | None = typer.Argument(None, help="List as 'owner/slug' (defaults to app.default_list)."),
    path: str | None = typer.Option(None, "--path", help=_PATH_HELP),
    cycles: int = typer.Option(1, "--cycles", help="Number of fetch cycles to run."),
    interval: int | None = typer.Option(
        None, "--interval", help="Seconds between fetches (defaults to fetcher.interval_seconds)."
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging."),
) -> None:
    config = _load_config_or_exit(path, action="Timeline watch")
    configure_logging(debug or config.app.debug)
    list_id = _resolve_list(list_name, config)

    account = TwitterAccount.from_environment(config.api.token_env)
    try:
        store = open_store(config.store.path)
    except StoreError as exc:
        typer.secho(f"Timeline watch failed: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(2) from exc

    host = ConsoleNoticeHost()
    current_notice: Disposable | None = None
    try:
        with ListTimelineViewModel(account.status, list_id, _api_factory(config), store=store) as view_model:

            def _on_logged_in(logged_in: bool) -> None:
                nonlocal current_notice
                if current_notice is not None:
                    current_notice.dispose()
                    current_notice = None
                if not logged_in:
                    current_notice = host.alert(
                        "Not logged in",
                        f"Set ${config.api.token_env} to an access token to fetch '{list_id}'.",
                    ).subscribe()

            def _on_tweets(change: CollectionChange) -> None:
                collection, changeset = change
                typer.echo(render_change(collection, changeset))

            view_model.bind_logged_in(_on_logged_in)
            view_model.bind_tweets(_on_tweets)
            result = run_fetch_loop(
                view_model.refresh,
                interval_seconds=interval or config.fetcher.interval_seconds,
                max_cycles=cycles,
            )
            if config.store.retention_days is not None:
                report = store.apply_retention(config.store.retention_days)
                if report.deleted:
                    typer.echo(f"Retention removed {report.deleted} tweet(s).")
    except (BindingError, SchedulerError, StoreError) as exc:
        typer.secho(f"Timeline watch failed: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(2) from exc
    finally:
        if current_notice is not None:
            current_notice.dispose()
        store.close()

    _emit_loop_summary(result)
    if result.interrupted:
        raise typer.Exit(130)


@timeline_app.command("show")
def timeline_show(
    path: str | None = typer.Option(None, "--path", help=_PATH_HELP),
    limit: int | None = typer.Option(None, "--limit", min=1, help="Show at most N tweets."),
    as_json: bool = typer.Option(False, "--json", help="Render tweets as JSON."),
) -> None:
    config = _load_config_or_exit(path, action="Timeline show")
    try:
        store = open_store(config.store.path)
        try:
            collection = store.objects()
        finally:
            store.close()
    except StoreError as exc:
        typer.secho(f"Timeline show failed: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(2) from exc

    if limit is not None:
        collection = TweetCollection(collection.items[:limit])
    typer.echo(render_json(collection) if as_json else render_pretty(collection))


@app.command("notice")
def notice(
    title: str = typer.Argument(..., help="Notice title."),
    description: str | None = typer.Option(None, "--description", help="Optional notice body."),
) -> None:
    """Show a notice and wait until it is closed."""
    host = ConsoleNoticeHost()
    closed: list[bool] = []
    subscription = host.alert(title, description).subscribe(on_completed=lambda: closed.append(True))
    try:
        host.wait_for_close()
    finally:
        subscription.dispose()
    typer.echo("Closed." if closed else "Dismissed.")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show tweetie version and exit."),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit()
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


def _api_factory(config: RuntimeConfig) -> ApiFactory:
    return partial(
        TwitterAPI,
        base_url=config.api.base_url,
        timeout=config.api.timeout_seconds,
        count=config.fetcher.count,
    )


def _load_config_or_exit(path: str | None, *, action: str) -> RuntimeConfig:
    try:
        return load_runtime_config(path)
    except ConfigError as exc:
        typer.secho(f"{action} failed: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(2) from exc


def _resolve_list(raw: str | None, config: RuntimeConfig) -> ListIdentifier:
    if raw is None:
        if config.app.default_list is None:
            raise typer.BadParameter(
                "No list given and app.default_list is not configured.", param_hint="LIST_NAME"
            )
        return config.app.default_list
    try:
        return ListIdentifier.parse(raw)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="LIST_NAME") from exc


def _emit_loop_summary(result: FetchLoopResult) -> None:
    skipped = sum(1 for cycle in result.cycles if cycle.skipped)
    typer.echo(
        f"Cycles: {len(result.cycles)} fetched={result.total_fetched} skipped={skipped}"
        + (" (interrupted)" if result.interrupted else "")
    )
