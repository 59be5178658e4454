import os

import click
from flask import current_app
from flask.cli import with_appcontext
from requests import RequestException

from .services.config_store import ConfigStore
from .services.sample_logs import build_sample_payload, send_logs


def _config_store(config_path: str | None) -> ConfigStore:
    if config_path:
        return ConfigStore(os.path.abspath(config_path))
    return current_app.extensions["slogger"].config_store


@click.command("ensure-config")
@with_appcontext
@click.option("--config", "config_path", default=None, help="config.json path (default: CONFIG_PATH)")
def ensure_config_command(config_path):
    """Create config.json with defaults if it does not exist."""
    store = _config_store(config_path)
    if store.ensure():
        click.echo(f"Created config: {store.path}")
    else:
        click.echo(f"Config already exists: {store.path}")


@click.command("generate-api-key")
@with_appcontext
@click.option("--name", default="default", show_default=True)
@click.option("--config", "config_path", default=None, help="config.json path (default: CONFIG_PATH)")
def generate_api_key_command(name, config_path):
    """Append a new API key and print the raw key (shown only once)."""
    store = _config_store(config_path)
    click.echo(store.add_api_key(name), nl=False)


@click.command("ensure-partitions")
@with_appcontext
@click.option("--days-ahead", type=int, default=None, help="default: PARTITION_DAYS_AHEAD")
def ensure_partitions_command(days_ahead):
    """Run one partition sweep now."""
    if days_ahead is None:
        days_ahead = current_app.config["PARTITION_DAYS_AHEAD"]

    report = current_app.extensions["slogger"].partitions.ensure_partitions(days_ahead)
    for day in report.ensured:
        click.echo(f"ok     {day.isoformat()}")
    for day, error in sorted(report.failed.items()):
        click.echo(f"failed {day.isoformat()} {error}", err=True)

    if not report.ok:
        raise click.exceptions.Exit(1)


@click.command("send-test-logs")
@with_appcontext
@click.option("--api-key", envvar="TEST_SLOGGER_API_KEY", default="")
@click.option("--base-url", envvar="TEST_SLOGGER_BASE_URL", default="http://localhost:5000", show_default=True)
@click.option("--source", default="test-data", show_default=True)
@click.option("--count", type=click.IntRange(min=1), default=25, show_default=True)
def send_test_logs_command(api_key, base_url, source, count):
    """POST synthetic events to a running server."""
    if not api_key:
        raise click.UsageError("Missing API key. Pass --api-key <key> or set TEST_SLOGGER_API_KEY.")

    payload = build_sample_payload(count)
    try:
        result = send_logs(base_url, api_key, source, payload)
    except RequestException as e:
        raise click.ClickException(f"Request failed: {e}") from e

    click.echo(f"Sent {len(payload)} logs to {source}")
    click.echo(result)


def register_commands(app) -> None:
    for command in (
        ensure_config_command,
        generate_api_key_command,
        ensure_partitions_command,
        send_test_logs_command,
    ):
        app.cli.add_command(command)
