#!/usr/bin/env python3
"""
Push CLI

Runs the push post-processor outside a full pipeline: the input artifact is
described on the command line and the pushed artifact is printed as JSON.

Commands:
    push        Log in (optionally), push an image and its tags, print the result
    validate    Validate a configuration and print it normalized
    schema      Print the configuration JSON schema

Usage:
    docker-push push [OPTIONS] [CONFIG_JSON]
    docker-push validate [OPTIONS] [CONFIG_JSON]
    docker-push schema

Module: cli
"""

import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import click
from dotenv import load_dotenv

from .artifact import GENERATED_DATA_KEY, IMPORT_BUILDER_ID, TAGS_KEY, ImportArtifact
from .config_schema import config_spec, load_config
from .errors import DockerPushError
from .logging_config import configure_logging
from .post_processor import PostProcessor
from .ui import ConsoleUi
from .version import __version__


def format_json(data: Any, pretty: bool = True) -> str:
    """Format data as JSON string"""
    if pretty:
        return json.dumps(data, indent=2, ensure_ascii=False)
    return json.dumps(data, ensure_ascii=False)


def handle_error(error: Exception, verbose: bool = False) -> None:
    """Handle and format errors"""
    if verbose:
        click.echo(f"Error: {type(error).__name__}: {error}", err=True)
        import traceback

        traceback.print_exc()
    else:
        click.echo(f"Error: {error}", err=True)
    sys.exit(1)


def read_json_argument(json_data: str) -> Dict[str, Any]:
    """
    Parse a JSON argument

    JSON_DATA can be:
    - JSON string: '{"key": "value"}'
    - File path: @/path/to/config.json
    - Stdin: - (read from stdin)
    """
    if json_data == "-":
        json_data = sys.stdin.read()
    elif json_data.startswith("@"):
        file_path = Path(json_data[1:])
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")
        json_data = file_path.read_text()

    data = json.loads(json_data)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data


@click.group()
@click.version_option(version=__version__, prog_name="docker-push")
@click.option("--log-level", default=None, help="Logging level (default: LOG_LEVEL or WARNING)")
def cli(log_level: Optional[str]):
    """
    Push container images built earlier in the pipeline

    Logs in to the registry when configured, pushes the image under its name
    and every tag, and reports the resulting digest.
    """
    load_dotenv()
    configure_logging(log_level or "")


@cli.command()
@click.argument("config_json", type=str, default="{}")
@click.option("--image-id", "-i", required=True, help="Primary image name to push")
@click.option("--tag", "-t", "tags", multiple=True, help="Additional name to push (repeatable)")
@click.option(
    "--builder-id",
    default=IMPORT_BUILDER_ID,
    help="Producer tag of the input artifact",
    show_default=True,
)
@click.option("--generated-data", default=None, help="JSON object carried forward as generated data")
@click.option("--pretty/--compact", default=True, help="Pretty print JSON output", show_default=True)
@click.option("--verbose", "-v", is_flag=True, help="Verbose error output")
def push(
    config_json: str,
    image_id: str,
    tags: tuple[str, ...],
    builder_id: str,
    generated_data: Optional[str],
    pretty: bool,
    verbose: bool,
):
    """
    Push an image and its tags

    CONFIG_JSON accepts the same forms as 'validate'.

    Examples:
        docker-push push '{"login": true, "login_server": "r.example.com"}' -i r.example.com/app -t r.example.com/app:v1
        docker-push push @push.json --image-id 123456789012.dkr.ecr.us-east-1.amazonaws.com/app
    """
    try:
        processor = PostProcessor()
        processor.configure(read_json_argument(config_json))

        state: Dict[str, Any] = {TAGS_KEY: list(tags)}
        if generated_data:
            state[GENERATED_DATA_KEY] = read_json_argument(generated_data)

        source = ImportArtifact(builder_id_value=builder_id, driver=None, id_value=image_id, state_data=state)
        result = processor.post_process(ConsoleUi(), source)

        click.echo(format_json(result.artifact.to_dict(), pretty=pretty))

    except (DockerPushError, ValueError, OSError) as e:
        handle_error(e, verbose)


@cli.command()
@click.argument("config_json", type=str, default="{}")
@click.option("--verbose", "-v", is_flag=True, help="Verbose error output")
def validate(config_json: str, verbose: bool):
    """
    Validate a push configuration

    CONFIG_JSON can be:
    - JSON string: '{"ecr_login": true, "login_server": "..."}'
    - File path: @/path/to/config.json
    - Stdin: - (read from stdin)

    Examples:
        docker-push validate '{"docker_path": "podman"}'
        docker-push validate @push.json
    """
    try:
        config = load_config(read_json_argument(config_json))
        click.echo("✓ Configuration is valid", err=True)
        click.echo(format_json(config.model_dump(by_alias=True, exclude={"login_password", "aws_secret_key", "aws_token"})))
    except (DockerPushError, ValueError, OSError) as e:
        handle_error(e, verbose)


@cli.command()
def schema():
    """Print the configuration JSON schema"""
    click.echo(format_json(config_spec()))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
