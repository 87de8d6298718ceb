from pathlib import Path
from typing import Optional

import click

from workhorse.modules.appid import AppIdentity, IdentityLoader
from workhorse.modules.config import AppConfig, ConfigLoader
from workhorse.modules.diagnostics.commands import create_diagnostics_commands
from workhorse.modules.errors import ConfigError, ExitCode, IdentityNotFoundError, exit_with_code
from workhorse.modules.logging import BaseLogger, create_logger
from workhorse.modules.server.commands import create_serve_command
from workhorse.version import VersionInfo, get_version_info


class WorkhorseContext:
    """Context object to store CLI state."""
    def __init__(self):
        self.logger: Optional[BaseLogger] = None
        self.identity: Optional[AppIdentity] = None
        self.config: Optional[AppConfig] = None
        self.config_file: Optional[Path] = None
        self.version_info: VersionInfo = get_version_info()

pass_context = click.make_pass_decorator(WorkhorseContext, ensure=True)

@click.group()
@click.option('--config', 'config_file',
              type=click.Path(dir_okay=False),
              default=None,
              help='Config file (default: $XDG_CONFIG_HOME/<app>/config.yaml)')
@click.option('--verbose', '-v',
              is_flag=True,
              help='Verbose output (debug level)')
@click.option('--output', '-o',
              type=click.Choice(['colorful', 'plain', 'json']),
              default='colorful',
              help='Output format (colorful for CLI, plain for CI/file, json for machine parsing)',
              envvar='WORKHORSE_OUTPUT')
@click.option('--log-level', '-l',
              type=click.Choice(['TRACE', 'DEBUG', 'INFO', 'WARN', 'WARNING', 'ERROR', 'CRITICAL'], case_sensitive=False),
              default='INFO',
              help='Set the logging level',
              envvar='WORKHORSE_LOG_LEVEL')
@pass_context
def cli(ctx, config_file, verbose, output, log_level):
    """Workhorse: a long-running HTTP service with graceful shutdown."""
    try:
        ctx.identity = IdentityLoader().load()
    except IdentityNotFoundError as e:
        exit_with_code(None, ExitCode.FILE_NOT_FOUND, "Failed to load app identity", e)
    except ConfigError as e:
        exit_with_code(None, ExitCode.CONFIG_INVALID, "Failed to load app identity", e)

    ctx.logger = create_logger(output, "DEBUG" if verbose else log_level)

    loader = ConfigLoader(ctx.identity)
    try:
        ctx.config = loader.load(config_file)
    except ConfigError as e:
        exit_with_code(ctx.logger, ExitCode.CONFIG_INVALID, "Failed to load configuration", e)
    ctx.config_file = loader.config_file_used

    if ctx.config_file is not None:
        ctx.logger.log_debug("Using config file", config_file=str(ctx.config_file))

# Add commands
cli.add_command(create_serve_command())
for command in create_diagnostics_commands():
    cli.add_command(command)

def main():
    cli()

if __name__ == '__main__':
    main()
