"""Ripple CLI - Main Entry Point.

Commands:
    parse    - Parse requirement specs
    inspect  - Show the decode plan of a decodable class
    encode   - Encode a JSON request body
"""

import importlib
import json
import logging
import sys
from typing import Optional

import click

from . import __version__, __cli_name__
from .utils.colors import error, info, kv, section, success, table, warning
from ..config import ConfigLoader, RippleConfig
from ..decoding import AccessorTable, class_fields, get_convention, parse_requirement, provides_requirements
from ..faults import ConfigInvalidFault, EncodingFault, MalformedRequirementFault
from ..serializers import SERIALIZERS, get_serializer


def _load_config(ctx: click.Context) -> RippleConfig:
    try:
        return ctx.obj["loader"].build()
    except ConfigInvalidFault as fault:
        error(str(fault))
        ctx.exit(2)


def _import_target(target: str) -> type:
    """Import ``package.module:ClassName``."""
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise click.BadParameter("expected MODULE:CLASS", param_hint="TARGET")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise click.BadParameter(f"cannot import {module_name!r}: {e}", param_hint="TARGET")

    obj = module
    for part in attr.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError:
            raise click.BadParameter(f"{module_name!r} has no attribute {attr!r}", param_hint="TARGET")
    if not isinstance(obj, type):
        raise click.BadParameter(f"{target} is not a class", param_hint="TARGET")
    return obj


@click.group()
@click.version_option(version=__version__, prog_name=__cli_name__)
@click.option("--naming", type=click.Choice(["snake", "camel"]), default=None, help="Accessor naming convention")
@click.option("--config", "config_paths", multiple=True, type=click.Path(), help="Config file (JSON/YAML)")
@click.option("--env-file", type=click.Path(), default=None, help=".env file with RIPPLE_* keys")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.pass_context
def cli(ctx, naming: Optional[str], config_paths, env_file: Optional[str], verbose: bool):
    """Post-decode propagation toolkit.

    \b
    Quick start:
      ripple parse "thread_url(media_id)"
      ripple inspect myapp.responses:Feed
      ripple encode body.json
    """
    overrides = {}
    if naming:
        overrides["naming"] = naming
    if verbose:
        overrides["log_level"] = "DEBUG"

    ctx.ensure_object(dict)
    try:
        ctx.obj["loader"] = ConfigLoader.load(
            paths=list(config_paths) or None,
            env_file=env_file,
            overrides=overrides,
        )
    except ConfigInvalidFault as fault:
        error(str(fault))
        ctx.exit(2)
    ctx.obj["verbose"] = verbose

    level = ctx.obj["loader"].get("log_level", "WARNING")
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.WARNING))


# ============================================================================
# Commands
# ============================================================================

@cli.command("parse")
@click.argument("specs", nargs=-1, required=True)
def parse_cmd(specs):
    """
    Parse requirement specs.

    Examples:
      ripple parse media_id "thread_url(media_id, cursor)"
    """
    failed = False
    for raw in specs:
        try:
            spec = parse_requirement(raw)
        except MalformedRequirementFault as fault:
            error(fault.message)
            failed = True
            continue
        params = ", ".join(spec.parameters) or "-"
        kv(spec.name, params)

    if failed:
        sys.exit(1)


@cli.command("inspect")
@click.argument("target")
@click.pass_context
def inspect_cmd(ctx, target: str):
    """
    Show the fields, accessors and requirements of a decodable class.

    Examples:
      ripple inspect myapp.responses:Feed
      ripple --naming camel inspect myapp.responses:Feed
    """
    config = _load_config(ctx)
    cls = _import_target(target)
    convention = get_convention(config.naming)

    section(f"{cls.__qualname__}")
    kv("naming", convention.name)

    fields = class_fields(cls) or ()
    section("Fields")
    if fields:
        for index, name in enumerate(fields, 1):
            kv(f"{index}", name, key_width=6)
    else:
        warning("  no declared fields")

    accessors = AccessorTable.for_type(cls, convention)
    rows = [(kind, name, method) for kind, name, method in accessors.describe()]
    section("Accessors")
    if rows:
        table(["Kind", "Name", "Method"], rows)
    else:
        warning("  no accessors")

    section("Requirements")
    try:
        instance = cls()
    except TypeError:
        info("  (class needs constructor arguments; requirements not listed)")
        return
    if not provides_requirements(instance):
        info("  none")
        return
    try:
        specs = [parse_requirement(raw) for raw in instance.requirements()]
    except MalformedRequirementFault as fault:
        error(fault.message)
        sys.exit(1)
    for spec in specs:
        kv(spec.name, ", ".join(spec.parameters) or "-")


@cli.command("encode")
@click.argument("source", type=click.File("r"), default="-")
@click.option("--serializer", "-s", type=click.Choice(list(SERIALIZERS)), default=None)
@click.option("--key", default=None, help="Signing key (signed serializer)")
@click.option("--key-version", type=int, default=None, help="Signing key version")
@click.pass_context
def encode_cmd(ctx, source, serializer: Optional[str], key: Optional[str], key_version: Optional[int]):
    """
    Encode a JSON object as a request body.

    Examples:
      ripple encode body.json
      echo '{"a": 1}' | ripple encode --serializer form
      ripple encode -s signed --key SECRET body.json
    """
    config = _load_config(ctx)
    name = serializer or config.serializer

    try:
        body = json.load(source)
    except json.JSONDecodeError as e:
        error(f"Invalid JSON input: {e}")
        sys.exit(1)

    options = {}
    if name == "signed":
        options["key"] = key or config.signing_key
        options["key_version"] = key_version if key_version is not None else config.signing_key_version

    try:
        encoded = get_serializer(name, **options).encode(body)
    except EncodingFault as fault:
        error(fault.message)
        sys.exit(1)

    click.echo(encoded)
    if ctx.obj["verbose"]:
        success(f"encoded with {name}")


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
