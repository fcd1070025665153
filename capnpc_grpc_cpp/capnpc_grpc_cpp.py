import json
import logging
import sys

import click

from . import __version__
from .pipeline import PluginConfig, PluginError, PluginGenerator
from .pipeline.version import PROTOCOL_VERSION

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]
INPUT_FORMATS = ["binary", "json"]


def configure_logging(level: str) -> None:
    """Send diagnostics to stderr; stdout is reserved for the compiler protocol."""
    logging.basicConfig(stream=sys.stderr, format="%(name)s: %(levelname)s: %(message)s")
    logging.getLogger("capnpc_grpc_cpp").setLevel(level)


@click.command(
    help=(
        "This is a Cap'n Proto compiler plugin which generates gRPC C++ code. "
        "It is meant to be run using the Cap'n Proto compiler, e.g.:\n\n"
        "    capnp compile -ogrpc-cpp foo.capnp"
    )
)
@click.version_option(
    __version__,
    prog_name="capnpc-grpc-cpp",
    message=f"Cap'n Proto gRPC C++ plugin version %(version)s (protocol {PROTOCOL_VERSION})",
)
@click.option("--config", "-c", default=None, type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.option("--output-dir", "-o", default=None, type=click.Path(file_okay=False), help="Directory for relative output paths")
@click.option("--header-suffix", default=None, type=str, help="Suffix of the generated declarations file")
@click.option("--source-suffix", default=None, type=str, help="Suffix of the generated definitions file")
@click.option("--format", "input_format", default=None, type=click.Choice(INPUT_FORMATS), help="Request encoding (default: binary)")
@click.option("--schema-path", default=None, type=click.Path(dir_okay=False), help="Location of schema.capnp for binary input")
@click.option("--log-level", default="WARNING", type=click.Choice(LOG_LEVELS, case_sensitive=False), show_default=True)
@click.argument("request", default="-", type=click.File("rb"))
def capnpc_grpc_cpp(config, output_dir, header_suffix, source_suffix, input_format, schema_path, log_level, request):
    configure_logging(log_level.upper())

    if config is not None:
        with open(config) as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise click.BadParameter(f"not valid JSON: {e}", param_hint="--config") from e
        if not isinstance(data, dict):
            raise click.BadParameter(f"must be a JSON object, got {type(data).__name__}", param_hint="--config")
        config = PluginConfig.from_dict(data)
    else:
        config = PluginConfig()

    # CLI flags override the config file
    if output_dir is not None:
        config.output_dir = output_dir
    if header_suffix is not None:
        config.header_suffix = header_suffix
    if source_suffix is not None:
        config.source_suffix = source_suffix
    if input_format is not None:
        config.input_format = input_format
    if schema_path is not None:
        config.schema_path = schema_path

    raw = request.read()

    try:
        PluginGenerator(config=config).run_bytes(raw)
    except PluginError as e:
        raise click.ClickException(str(e)) from e
