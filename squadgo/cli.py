"""Flask CLI commands for the periodic matchmaking jobs.

``pair-tickets`` and ``expire-tickets`` run one pass and exit, for an
external cron. ``run-jobs`` keeps both jobs running in the foreground.
"""

import json

import click
from flask import Flask, current_app

from .extensions import backend, scheduler


def register_jobs(app: Flask) -> None:
    """Register the pairing and expiration jobs on the scheduler."""
    services = app.extensions["squadgo"]
    scheduler.add_job(
        "pair-tickets",
        services.pairing.run_pairing_pass,
        app.config["PAIRING_INTERVAL_SECONDS"],
        app=app,
    )
    scheduler.add_job(
        "expire-tickets",
        services.reaper.run_expiration_sweep,
        app.config["EXPIRATION_INTERVAL_SECONDS"],
        app=app,
    )


@click.command("pair-tickets")
def pair_tickets_command():
    """Run one pairing pass over the waiting tickets."""
    summary = backend.services.pairing.run_pairing_pass()
    click.echo(json.dumps(summary.to_dict()))


@click.command("expire-tickets")
def expire_tickets_command():
    """Expire tickets that have waited past their deadline."""
    expired = backend.services.reaper.run_expiration_sweep()
    click.echo(json.dumps({"expired": expired}))


@click.command("run-jobs")
def run_jobs_command():
    """Run the pairing and expiration jobs until interrupted."""
    app = current_app._get_current_object()
    if not scheduler.jobs:
        register_jobs(app)
    scheduler.start()
    click.echo(f"Running jobs: {', '.join(scheduler.jobs)} (Ctrl+C to stop)")
    try:
        scheduler.wait()
    except KeyboardInterrupt:
        scheduler.shutdown(wait=False)


def init_app(app: Flask) -> None:
    """Attach the job commands to ``app.cli``."""
    app.cli.add_command(pair_tickets_command)
    app.cli.add_command(expire_tickets_command)
    app.cli.add_command(run_jobs_command)
