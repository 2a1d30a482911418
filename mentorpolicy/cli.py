"""Command line interface for ad-hoc policy checks."""

from __future__ import annotations

import asyncio
import json
from typing import Optional

import typer

from mentorpolicy.config import configure_logging, load_config
from mentorpolicy.evaluator import PolicyEvaluator
from mentorpolicy.service import PolicyService
from mentorpolicy.store import get_attribute_store

app = typer.Typer(help="CLI for mentorship access policies")


def _service() -> PolicyService:
    config = load_config()
    return PolicyService(
        get_attribute_store(),
        evaluator=PolicyEvaluator(cancellation_window=config.cancellation_window),
    )


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """mentorpolicy CLI entry point."""
    configure_logging("DEBUG" if verbose else load_config().log_level)


@app.command("check")
def check(
    subject_id: str,
    resource_type: str,
    action: str,
    data: Optional[str] = typer.Option(
        None, "--data", help="JSON object with the resource fields"
    ),
    at: Optional[str] = typer.Option(
        None, "--at", help="ISO-8601 evaluation time (defaults to now)"
    ),
) -> None:
    """
    Evaluate a single policy decision.

    Prints ALLOW or DENY and exits with code 1 when the action is denied.

    Example:
        mentorpolicy check u-42 course update --data '{"creatorId": "u-42"}'
        mentorpolicy check u-42 session cancel \\
            --data '{"menteeId": "u-42", "scheduledAt": "2025-03-01T10:00:00Z"}' \\
            --at 2025-02-27T09:00:00Z
    """
    try:
        fields = json.loads(data) if data else {}
    except json.JSONDecodeError as exc:
        typer.secho(f"Invalid --data JSON: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    if not isinstance(fields, dict):
        typer.secho("--data must be a JSON object", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    resource = {**fields, "type": resource_type}
    environment = {"time": at} if at else None
    allowed = asyncio.run(
        _service().evaluate_policy(resource, action, environment, subject_id=subject_id)
    )
    if allowed:
        typer.secho("ALLOW", fg=typer.colors.GREEN)
        return
    typer.secho("DENY", fg=typer.colors.RED)
    raise typer.Exit(code=1)


@app.command("context")
def context(subject_id: str) -> None:
    """Show the permission context for a user as JSON."""
    ctx = asyncio.run(_service().get_permission_context(subject_id))
    typer.echo(ctx.model_dump_json(indent=2, exclude_none=True))


@app.command("role")
def role(subject_id: str) -> None:
    """Show the resolved role for a user."""
    typer.echo(asyncio.run(_service().get_user_role(subject_id)))


if __name__ == "__main__":  # pragma: no cover
    app()
