import asyncio
import json
import random

import click

from . import __version__
from .config import get_settings
from .orchestrator import AgentGateway
from .providers import DEFAULT_REGISTRY
from .store import JsonFileSettingsStore
from .telemetry import setup_logging


def get_version():
    return __version__


def build_gateway(settings_file, seed=None):
    store = JsonFileSettingsStore(settings_file)
    rng = random.Random(seed) if seed is not None else None
    return AgentGateway(get_settings(), store=store, rng=rng)


async def run_prompts(settings_file, prompts, offline=None, batch=False, seed=None):
    async with build_gateway(settings_file, seed) as gateway:
        if offline is not None:
            gateway.set_offline_mode(offline)
        if batch:
            gateway.set_batch_mode(True)
        futures = [gateway.submit(prompt) for prompt in prompts]
        return await asyncio.gather(*futures)


async def apply_setting(settings_file, action):
    async with build_gateway(settings_file) as gateway:
        return action(gateway)


async def read_status(settings_file):
    async with build_gateway(settings_file) as gateway:
        return gateway.get_status()


def change(ctx, action, ok_message, fail_message):
    ok = asyncio.run(apply_setting(ctx.obj["settings_file"], action))
    if not ok:
        raise click.ClickException(fail_message)
    click.echo(ok_message)


@click.group()
@click.option(
    "--settings-file",
    type=click.Path(dir_okay=False),
    default=None,
    help="JSON file holding provider, model, keys and mode flags.",
)
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
)
@click.pass_context
def cli(ctx, settings_file, log_level):
    setup_logging(level=log_level)
    ctx.ensure_object(dict)
    ctx.obj["settings_file"] = settings_file or get_settings().settings_file


@cli.command()
@click.option("--format", default="text", type=click.Choice(["text", "json"]))
def version(format):
    if format == "json":
        click.echo(json.dumps({"version": get_version()}))
    else:
        click.echo(f"v{get_version()}")


@cli.command()
def providers():
    """List providers and their models."""
    for provider in DEFAULT_REGISTRY:
        click.echo(f"{provider.id} ({provider.name})")
        for model_id, model in provider.models.items():
            marker = "*" if model_id == provider.default_model else " "
            click.echo(f"  {marker} {model_id}: {model.description}")


@cli.command()
@click.pass_context
def status(ctx):
    """Print the current status snapshot as JSON."""
    snapshot = asyncio.run(read_status(ctx.obj["settings_file"]))
    click.echo(snapshot.model_dump_json(indent=2))


@cli.command()
@click.argument("prompts", nargs=-1, required=True)
@click.option("--offline/--online", default=None, help="Switch mode before submitting (saved).")
@click.option("--batch", is_flag=True, help="Process the prompts in batch mode.")
@click.option("--seed", type=int, default=None, help="Seed for offline template choice.")
@click.pass_context
def submit(ctx, prompts, offline, batch, seed):
    """Submit one or more prompts and print each answer."""
    answers = asyncio.run(
        run_prompts(ctx.obj["settings_file"], prompts, offline=offline, batch=batch, seed=seed)
    )
    for answer in answers:
        click.echo(answer)


@cli.command("set-key")
@click.argument("provider")
@click.argument("key")
@click.pass_context
def set_key(ctx, provider, key):
    """Store an API key for PROVIDER and switch to online mode."""
    change(
        ctx,
        lambda gateway: gateway.set_api_key(provider, key),
        f"API key saved for {provider}",
        f"Invalid API key for {provider}",
    )


@cli.command("set-provider")
@click.argument("provider")
@click.pass_context
def set_provider(ctx, provider):
    change(
        ctx,
        lambda gateway: gateway.set_provider(provider),
        f"Provider set to {provider}",
        f"Unknown provider: {provider}",
    )


@cli.command("set-model")
@click.argument("model")
@click.pass_context
def set_model(ctx, model):
    change(
        ctx,
        lambda gateway: gateway.set_model(model),
        f"Model set to {model}",
        f"Unknown model for the current provider: {model}",
    )


@cli.command("set-org")
@click.argument("organization", required=False)
@click.pass_context
def set_org(ctx, organization):
    """Set the OpenAI organization id; omit it to clear."""
    change(
        ctx,
        lambda gateway: gateway.set_organization_id(organization),
        f"Organization set to {organization}" if organization else "Organization cleared",
        "Could not update organization",
    )


@cli.command()
@click.argument("mode", type=click.Choice(["on", "off"]))
@click.pass_context
def offline(ctx, mode):
    """Turn offline mode on or off."""
    enabled = mode == "on"
    change(
        ctx,
        lambda gateway: gateway.set_offline_mode(enabled) is enabled,
        f"Offline mode {'enabled' if enabled else 'disabled'}",
        "Could not change offline mode",
    )


if __name__ == "__main__":
    cli()
