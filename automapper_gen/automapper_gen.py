import logging
import sys
from pathlib import Path

import click

from .pipeline import CodeGeneratorConfig, GenerationError, OutputMode, PipelineGenerator
from .pipeline.analyzer.diagnostics import ValidationResult
from .pipeline.errors import AutomapperError
from .pipeline.schema import load_schema


def _report(result: ValidationResult) -> None:
    for diagnostic in result.diagnostics:
        click.echo(str(diagnostic))

    stats = result.stats
    click.echo(
        f"Checked {stats.get('targets', 0)} targets, {stats.get('sources', 0)} sources, "
        f"{stats.get('fields', 0)} fields: {stats.get('errors', 0)} errors, {stats.get('warnings', 0)} warnings"
    )


@click.command()
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option("--package", "-p", default=None, type=str, help="Package name of the generated file")
@click.option("--validate-only", is_flag=True, default=False, help="Only validate mappings, do not generate code")
@click.option("--force", is_flag=True, default=False, help="Overwrite an existing output file")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
@click.argument("path", type=click.Path(exists=True, resolve_path=True))
@click.argument("output", required=False, default=None, type=click.Path(resolve_path=True))
def automapper_gen(config, package, validate_only, force, verbose, path, output):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if config is not None:
            config = CodeGeneratorConfig.from_file(config)
        else:
            config = CodeGeneratorConfig()

        # CLI flags override the config file
        if package:
            config.package = package
        if force:
            config.output_options.mode = OutputMode.FORCE

        generator = PipelineGenerator(load_schema(path, config), config)

        if validate_only:
            result = generator.validate()
            _report(result)
            if not result.is_valid():
                sys.exit(1)
            click.echo("Validation passed")
            return

        if output is None:
            output = Path(path).parent / config.output

        written = generator.write(output)
    except GenerationError as e:
        _report(e.result)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except (AutomapperError, FileExistsError) as e:
        raise click.ClickException(str(e)) from e

    _report(generator.result)
    click.echo(f"Generated {written}")
