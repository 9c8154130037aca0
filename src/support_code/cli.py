import json
import click
import yaml
import logging
from pathlib import Path
from typing import Any, Dict

from .core import ConfigManager, SupportCodeError
from .library import HookCategory, SupportCodeLibrary, SupportCodeLoader, create_builder
from . import __version__

_HOOK_SECTIONS = (
    ("BeforeAll", HookCategory.BEFORE_TEST_RUN),
    ("Before", HookCategory.BEFORE_TEST_CASE),
    ("After", HookCategory.AFTER_TEST_CASE),
    ("AfterAll", HookCategory.AFTER_TEST_RUN),
)


@click.group()
@click.option('--config', '-c', type=click.Path(), help='Configuration file path')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.pass_context
def cli(ctx, config, verbose):
    """Support Code Library - inspect step definitions and hooks"""
    # Load configuration
    config_path = Path(config) if config else None
    try:
        ctx.obj = ConfigManager(config_path)
    except SupportCodeError as e:
        raise click.ClickException(str(e))

    # Setup logging
    level = 'DEBUG' if verbose else str(ctx.obj.get('general.log_level', 'INFO')).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


@cli.command()
def version():
    """Show version information"""
    click.echo(f"Support Code Library v{__version__}")


@cli.command(name='list')
@click.argument('paths', nargs=-1, type=click.Path())
@click.option('--project-path', '-p', type=click.Path(file_okay=False), default='.',
              help='Project root used to resolve support paths')
@click.option('--format', '-f', 'output_format', type=click.Choice(['text', 'json', 'yaml']),
              default='text', help='Output format')
@click.pass_obj
def list_definitions(config, paths, project_path, output_format):
    """Load support code and list its steps and hooks in run order"""
    paths = list(paths) or config.get('support.paths', [])

    try:
        builder = create_builder({
            'default_timeout': config.get('library.default_timeout'),
        })
        library = SupportCodeLoader(builder).load(paths, project_path)
    except SupportCodeError as e:
        raise click.ClickException(str(e))

    summary = summarize_library(library)

    if output_format == 'json':
        click.echo(json.dumps(summary, indent=2))
    elif output_format == 'yaml':
        click.echo(yaml.dump(summary, default_flow_style=False, sort_keys=False))
    else:
        _echo_text(summary)


@cli.command(name='init-config')
@click.argument('path', type=click.Path(dir_okay=False), default='support-code.yaml')
def init_config(path):
    """Write the default configuration file"""
    config_path = Path(path)

    if config_path.exists():
        raise click.ClickException(f"'{path}' already exists")

    manager = ConfigManager(config_path)
    manager.save()
    click.echo(f"Created configuration: {config_path}")


def summarize_library(library: SupportCodeLibrary) -> Dict[str, Any]:
    """Plain-data view of a finalized library"""
    return {
        'run_id': library.run_id,
        'default_timeout': library.default_timeout,
        'steps': [
            {
                'id': step.id,
                'pattern': step.pattern_source,
                'timeout': step.options.timeout,
                'location': str(step.location),
            }
            for step in library.step_definitions
        ],
        'hooks': {
            title: [
                {
                    'id': hook.id,
                    'name': hook.options.name or getattr(hook.unwrapped_code, '__name__', repr(hook.unwrapped_code)),
                    'tags': hook.options.tags,
                    'location': str(hook.location),
                }
                for hook in library.hook_definitions(category)
            ]
            for title, category in _HOOK_SECTIONS
        },
    }


def _echo_text(summary: Dict[str, Any]) -> None:
    click.echo(f"Steps ({len(summary['steps'])}):")
    for step in summary['steps']:
        click.echo(f"  {step['pattern']}  [{step['location']}]")

    for title, hooks in summary['hooks'].items():
        click.echo(f"\n{title} hooks ({len(hooks)}):")
        for hook in hooks:
            tags = f" {hook['tags']}" if hook['tags'] else ""
            click.echo(f"  {hook['name']}{tags}  [{hook['location']}]")

    click.echo(f"\nDefault timeout: {summary['default_timeout']}ms")


def main():
    """Main entry point"""
    cli()


if __name__ == "__main__":
    main()
