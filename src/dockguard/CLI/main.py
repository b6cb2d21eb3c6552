"""
Command Line Interface for dockguard.
"""
import logging

import click

from .. import __version__
from ..MODELS.policy_config import PolicyConfig
from ..PARSERS.dockerfile_parser import DockerfileParser, DockerfileParseError
from ..PARSERS.policy_parser import PolicyParser, PolicyConfigError
from ..REPORTERS.to_json import JsonReporter, dump_instructions
from ..REPORTERS.to_text import TextReporter
from ..RULES.docker_rules import RULES
from ..RUNNERS.policy_runner import PolicyRunner, exit_code


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.version_option(__version__, prog_name='dockguard')
@click.pass_context
def cli(ctx, verbose):
    """
    dockguard - Dockerfile policy checks.

    Evaluates Dockerfiles against the container build policy and exits
    non-zero when a blocking violation is found.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_policy(policy, env_file) -> PolicyConfig:
    """
    Loads the policy file, or the stock policy when none is given.
    """
    try:
        parser = PolicyParser.with_env_file(env_file) if env_file else PolicyParser()
        if not policy:
            return PolicyConfig()
        return parser.parse(policy)
    except PolicyConfigError as e:
        raise click.BadParameter(str(e), param_hint="'--policy'") from e


@cli.command()
@click.argument('files', nargs=-1, required=True, type=click.Path(dir_okay=False, allow_dash=True))
@click.option('--policy', '-p', type=click.Path(exists=True, dir_okay=False), help='Policy configuration file')
@click.option('--env-file', type=click.Path(exists=True, dir_okay=False), help='Dotenv file used to interpolate the policy')
@click.option('--output', '-o', type=click.Choice(['stdout', 'json']), default='stdout', help='Report format')
@click.option('--fail-on-warn', is_flag=True, help='Return a non-zero exit code if warnings are found')
@click.pass_context
def test(ctx, files, policy, env_file, output, fail_on_warn):
    """Check Dockerfiles against the policy. Use - to read from stdin."""
    config = _load_policy(policy, env_file)
    runner = PolicyRunner(config)

    results = []
    for path in files:
        if path == '-':
            results.append(runner.run_content(click.get_text_stream('stdin').read(), filename='-'))
        else:
            results.append(runner.run_file(path))

    reporter = JsonReporter() if output == 'json' else TextReporter()
    click.echo(reporter.render(results))
    ctx.exit(exit_code(results, fail_on_warn=fail_on_warn))


@cli.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
def parse(file):
    """Print the parsed instructions of a Dockerfile as JSON."""
    try:
        instructions = DockerfileParser().parse(file)
    except DockerfileParseError as e:
        raise click.ClickException(f"{file}: {e}") from e
    except UnicodeDecodeError as e:
        raise click.ClickException(f"{file}: cannot read file: {e}") from e
    click.echo(dump_instructions(instructions))


@cli.command('rules')
def list_rules():
    """List the rules that are evaluated."""
    click.echo(f"{'RULE':24} {'SEVERITY':9} DESCRIPTION")
    click.echo("-" * 70)
    for rule in RULES:
        click.echo(f"{rule.id:24} {rule.severity.value:9} {rule.description}")


def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})


if __name__ == '__main__':
    main()
