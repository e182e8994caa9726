#!/usr/bin/env python3
"""
Stack lifecycle CLI commands.
"""

import json
import logging
import sys
from typing import NoReturn, Optional, Tuple

import click
from botocore.exceptions import BotoCoreError, ClientError

from ..config import load_config
from ..errors import StackError
from ..parameters import load_parameters, merge_parameters, parse_parameter_overrides
from ..stack import Stack

logger = logging.getLogger(__name__)

HANDLED_ERRORS = (StackError, ClientError, BotoCoreError, ValueError, OSError)


def make_stack(
    stack_name: str,
    region: Optional[str],
    profile: Optional[str],
    config_path: Optional[str],
) -> Stack:
    """Build a Stack from command line options and configuration."""
    config = load_config(config_path)
    return Stack(
        stack_name,
        region=region or config.region,
        profile=profile or config.profile,
        config=config,
        echo=click.echo,
    )


def read_template(path: str) -> str:
    with open(path, "r") as f:
        return f.read()


def read_parameters(parameters_file: Optional[str], overrides: Tuple[str, ...]) -> list:
    """Combine a parameters file with KEY=VALUE overrides."""
    base = load_parameters(parameters_file) if parameters_file else []
    return merge_parameters(base, parse_parameter_overrides(overrides))


def fail(e: Exception) -> NoReturn:
    click.echo(f"Error: {e}", err=True)
    sys.exit(1)


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """CloudFormation stack lifecycle commands."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.option("--stack-name", "-s", required=True, help="CloudFormation stack name")
@click.option("--template", "-t", required=True, type=click.Path(exists=True), help="Template file")
@click.option("--parameters", "-p", "parameters_file", type=click.Path(exists=True), help="Parameters file (YAML or JSON)")
@click.option("--parameter", "overrides", multiple=True, help="Parameter override KEY=VALUE")
@click.option("--region", help="AWS region")
@click.option("--profile", help="AWS profile to use")
@click.option("--config", "config_path", type=click.Path(), help="Configuration file")
def deploy(stack_name, template, parameters_file, overrides, region, profile, config_path) -> None:
    """Create or update a stack."""
    try:
        stack = make_stack(stack_name, region, profile, config_path)
        changed = stack.deploy(read_template(template), read_parameters(parameters_file, overrides))
        if changed:
            click.echo(f"✅ Stack {stack_name} deployed")
    except HANDLED_ERRORS as e:
        fail(e)


@main.command()
@click.option("--stack-name", "-s", required=True, help="CloudFormation stack name")
@click.option("--template", "-t", required=True, type=click.Path(exists=True), help="Template file")
@click.option("--parameters", "-p", "parameters_file", type=click.Path(exists=True), help="Parameters file (YAML or JSON)")
@click.option("--parameter", "overrides", multiple=True, help="Parameter override KEY=VALUE")
@click.option("--region", help="AWS region")
@click.option("--profile", help="AWS profile to use")
@click.option("--config", "config_path", type=click.Path(), help="Configuration file")
def create(stack_name, template, parameters_file, overrides, region, profile, config_path) -> None:
    """Create a new stack."""
    try:
        stack = make_stack(stack_name, region, profile, config_path)
        created = stack.create(read_template(template), read_parameters(parameters_file, overrides))
    except HANDLED_ERRORS as e:
        fail(e)

    if not created:
        click.echo(f"Stack {stack_name} was not created", err=True)
        sys.exit(1)
    click.echo(f"✅ Stack {stack_name} created")


@main.command()
@click.option("--stack-name", "-s", required=True, help="CloudFormation stack name")
@click.option("--template", "-t", required=True, type=click.Path(exists=True), help="Template file")
@click.option("--parameters", "-p", "parameters_file", type=click.Path(exists=True), help="Parameters file (YAML or JSON)")
@click.option("--parameter", "overrides", multiple=True, help="Parameter override KEY=VALUE")
@click.option("--region", help="AWS region")
@click.option("--profile", help="AWS profile to use")
@click.option("--config", "config_path", type=click.Path(), help="Configuration file")
def update(stack_name, template, parameters_file, overrides, region, profile, config_path) -> None:
    """Update an existing stack."""
    try:
        stack = make_stack(stack_name, region, profile, config_path)
        if stack.update(read_template(template), read_parameters(parameters_file, overrides)):
            click.echo(f"✅ Stack {stack_name} updated")
    except HANDLED_ERRORS as e:
        fail(e)


@main.command()
@click.option("--stack-name", "-s", required=True, help="CloudFormation stack name")
@click.option("--region", help="AWS region")
@click.option("--profile", help="AWS profile to use")
@click.option("--config", "config_path", type=click.Path(), help="Configuration file")
def delete(stack_name, region, profile, config_path) -> None:
    """Delete a stack."""
    try:
        stack = make_stack(stack_name, region, profile, config_path)
        stack.delete()
        click.echo(f"🗑️  Stack {stack_name} deleted")
    except HANDLED_ERRORS as e:
        fail(e)


@main.command()
@click.option("--stack-name", "-s", required=True, help="CloudFormation stack name")
@click.option("--region", help="AWS region")
@click.option("--profile", help="AWS profile to use")
@click.option("--config", "config_path", type=click.Path(), help="Configuration file")
def status(stack_name, region, profile, config_path) -> None:
    """Show stack status."""
    try:
        stack = make_stack(stack_name, region, profile, config_path)
        if not stack.exists():
            click.echo(f"Stack {stack_name} does not exist")
            sys.exit(1)
        click.echo(stack.status())
    except HANDLED_ERRORS as e:
        fail(e)


@main.command()
@click.option("--stack-name", "-s", required=True, help="CloudFormation stack name")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.option("--region", help="AWS region")
@click.option("--profile", help="AWS profile to use")
@click.option("--config", "config_path", type=click.Path(), help="Configuration file")
def outputs(stack_name, output_json, region, profile, config_path) -> None:
    """Show stack outputs."""
    try:
        stack = make_stack(stack_name, region, profile, config_path)
        values = stack.outputs()
    except HANDLED_ERRORS as e:
        fail(e)

    if output_json:
        click.echo(json.dumps(values, indent=2, sort_keys=True))
        return
    for key, value in sorted(values.items()):
        click.echo(f"{key}: {value}")


@main.command()
@click.option("--stack-name", "-s", required=True, help="CloudFormation stack name")
@click.option("--template", "-t", required=True, type=click.Path(exists=True), help="Template file")
@click.option("--region", help="AWS region")
@click.option("--profile", help="AWS profile to use")
@click.option("--config", "config_path", type=click.Path(), help="Configuration file")
def validate(stack_name, template, region, profile, config_path) -> None:
    """Validate a template with CloudFormation."""
    try:
        stack = make_stack(stack_name, region, profile, config_path)
        valid = stack.valid(read_template(template))
    except HANDLED_ERRORS as e:
        fail(e)

    if not valid:
        click.echo(f"❌ Template {template} is not valid", err=True)
        sys.exit(1)
    click.echo(f"✅ Template {template} is valid")
