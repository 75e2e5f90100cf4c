"""
``flask importer`` commands: list importers, run one, manage the worker.
"""

from __future__ import annotations

import json
from typing import Optional

import click
from celery import Celery
from celery.exceptions import TimeoutError as CeleryTimeoutError
from flask import Flask
from flask.cli import ScriptInfo

from index_app.importer.celery_app import DEFAULT_QUEUE_NAME, get_celery_app
from index_app.importer.registry import UnknownImporterError, get_importer_registry, resolve_importers
from index_app.importer.service import run_importer
from index_app.utils.importer import is_importer_disabled, is_importer_enabled

DISABLED_MESSAGE = "Importer commands are unavailable because IMPORTER_ENABLED=false."


def _load_app(ctx: click.Context) -> Flask:
    return ctx.ensure_object(ScriptInfo).load_app()


def _celery_for(app: Flask) -> Celery:
    celery_app = get_celery_app(app)
    if celery_app is None:
        raise click.ClickException("No Celery app is registered; is IMPORTER_ENABLED=true?")
    return celery_app


@click.group(name="importer", invoke_without_command=True)
@click.pass_context
def importer_cli(ctx):
    """
    Importer management commands.

    Without a subcommand, lists the registered importers.
    """
    if not is_importer_enabled(_load_app(ctx)):
        raise click.ClickException(DISABLED_MESSAGE)
    if ctx.invoked_subcommand is None:
        ctx.invoke(importer_list)


def get_disabled_importer_group() -> click.Group:
    """Stand-in ``importer`` group mounted while the feature flag is off."""

    @click.group(name="importer", invoke_without_command=True)
    def disabled_group():
        raise click.ClickException(DISABLED_MESSAGE)

    return disabled_group


@importer_cli.command("list")
@click.pass_context
def importer_list(ctx):
    """Show registered importers and whether each may run."""
    app = _load_app(ctx)
    for name, descriptor in get_importer_registry().items():
        state = "disabled" if is_importer_disabled(name, app) else "enabled"
        source = app.config.get(descriptor.source_config_key) or "<unset>"
        click.echo(f"  - {name} [{state}] {descriptor.title} (source: {source})")


def _enqueue(app: Flask, name: str) -> dict:
    if is_importer_disabled(name, app):
        raise click.ClickException(f"Importer '{name}' is disabled; not enqueuing.")
    result = _celery_for(app).send_task("importer.run", kwargs={"importer": name}, queue=DEFAULT_QUEUE_NAME)
    app.logger.info("Importer run queued", extra={"importer_name": name, "importer_task_id": result.id})
    return {"importer": name, "task_id": result.id, "status": "queued"}


def _run_inline(app: Flask, name: str) -> dict:
    with app.app_context():
        try:
            return run_importer(name, app=app)
        except Exception as exc:
            raise click.ClickException(f"Importer '{name}' failed: {exc}") from exc


@importer_cli.command("run")
@click.argument("name")
@click.option("--queue/--inline", default=False, help="Hand the run to the Celery worker instead of running it here.")
@click.pass_context
def importer_run(ctx, name: str, queue: bool):
    """Run the importer registered as NAME."""
    app = _load_app(ctx)
    try:
        resolve_importers((name,))
    except UnknownImporterError as exc:
        raise click.ClickException(str(exc)) from exc

    payload = _enqueue(app, name) if queue else _run_inline(app, name)
    click.echo(json.dumps(payload))


@importer_cli.group(name="worker")
def worker_group():
    """Manage the importer background worker."""


@worker_group.command("run")
@click.option("--loglevel", default="info", show_default=True)
@click.option("--concurrency", type=int, help="Number of worker processes/threads.")
@click.option("--pool", type=str, help="Celery pool implementation, e.g. prefork, solo or threads.")
@click.pass_context
def worker_run(ctx, loglevel: str, concurrency: Optional[int], pool: Optional[str]):
    """Start a Celery worker consuming the imports queue in this process."""
    celery_app = _celery_for(_load_app(ctx))

    argv = ["worker", "--loglevel", loglevel, "-Q", DEFAULT_QUEUE_NAME]
    for flag, value in (("--concurrency", concurrency), ("--pool", pool)):
        if value:
            argv.extend([flag, str(value)])

    click.echo(f"Starting importer worker on queue '{DEFAULT_QUEUE_NAME}' (loglevel {loglevel})")
    try:
        celery_app.worker_main(argv=argv)
    except KeyboardInterrupt:
        click.echo("Worker stopped.")


@worker_group.command("ping")
@click.option("--timeout", default=10.0, show_default=True, help="Seconds to wait for a response.")
@click.pass_context
def worker_ping(ctx, timeout: float):
    """Round-trip the heartbeat task through the worker."""
    celery_app = _celery_for(_load_app(ctx))
    heartbeat = celery_app.tasks.get("importer.healthcheck")
    if heartbeat is None:
        raise click.ClickException("Heartbeat task 'importer.healthcheck' is not registered.")
    try:
        payload = heartbeat.apply_async().get(timeout=timeout)
    except CeleryTimeoutError as exc:
        raise click.ClickException(f"Worker did not respond within {timeout}s") from exc
    click.echo(json.dumps(payload, indent=2))
