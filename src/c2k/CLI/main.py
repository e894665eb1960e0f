"""
Command Line Interface for C2K.
"""
import click
import logging
import sys
from typing import List
from ..PARSERS.compose_parser import ComposeParser
from ..CONVERTERS.to_replica_set import ReplicaSetConverter
from ..CONVERTERS.replica_set_writer import ReplicaSetWriter
from ..MODELS.run_config import RunConfig
from ..exceptions import C2KError

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False, debug: bool = False):
    """
    Configures logging on stderr; stdout is kept for the written file paths.

    :param verbose: Show progress messages.
    :param debug: Show everything, with timestamps and logger names.
    """
    if debug:
        level = logging.DEBUG
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    elif verbose:
        level = logging.INFO
        format_str = "%(levelname)s: %(message)s"
    else:
        level = logging.WARNING
        format_str = "%(levelname)s: %(message)s"

    logging.basicConfig(level=level, format=format_str, stream=sys.stderr, force=True)


def run(config: RunConfig) -> List[str]:
    """
    Parses the compose file, translates every service and writes the descriptors.

    Every service is translated before anything is written, so a
    translation error leaves the output directory untouched.

    :param config: Settings for this run.
    :return: Paths of the written files, ordered by service name.
    :raises C2KError: On the first fatal problem.
    """
    if config.env_file:
        parser = ComposeParser.from_env_file(config.env_file)
    else:
        parser = ComposeParser()
    compose = parser.parse(config.compose_file)

    converter = ReplicaSetConverter(compose)
    replica_sets = converter.translate_all(collect_errors=config.collect_errors)

    writer = ReplicaSetWriter(config.output_dir, config.output_format)
    paths = writer.write_all(replica_sets)
    logger.info("Wrote %d replica set(s) to %s", len(paths), config.output_dir)
    return paths


@click.command()
@click.option('--compose-file', '-f', default='docker-compose.yml', show_default=True,
              help='Specify an alternate compose file')
@click.option('--output-dir', '-o', default='output', show_default=True,
              help='Kubernetes configs output directory')
@click.option('--format', '-t', 'output_format', type=click.Choice(['json', 'yaml']),
              default='json', show_default=True, help='Descriptor file format')
@click.option('--env-file', default=None, help='File with variables for compose interpolation')
@click.option('--collect-errors', is_flag=True,
              help='Report every failing service instead of stopping at the first one')
@click.option('--verbose', '-v', is_flag=True, help='Show progress messages')
@click.option('--debug', is_flag=True, help='Show debug messages')
def cli(compose_file, output_dir, output_format, env_file, collect_errors, verbose, debug):
    """
    C2K - Compose to Kubernetes converter.

    Writes one ReplicaSet descriptor per compose service.
    """
    setup_logging(verbose, debug)
    config = RunConfig(
        compose_file=compose_file,
        output_dir=output_dir,
        output_format=output_format,
        env_file=env_file,
        collect_errors=collect_errors,
    )
    try:
        paths = run(config)
    except C2KError as e:
        raise click.ClickException(str(e)) from e

    for path in paths:
        click.echo(path)


def main():
    """
    Main entry point for the CLI.
    """
    cli()

if __name__ == '__main__':
    main()
