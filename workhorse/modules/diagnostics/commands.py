import click
from typing import List, Optional
from .command.doctor import DoctorCommand
from .command.envinfo import EnvInfoCommand
from .command.health import HealthCommand
from .command.version import VersionCommand


def create_diagnostics_commands() -> List[click.Command]:
    """Create the version, health, doctor and envinfo commands."""

    @click.command(name='version')
    @click.option('--extended', '-e', is_flag=True, help='Show commit, build date, Python and dependency versions')
    @click.pass_context
    def version(ctx, extended: bool):
        """Print version information."""
        VersionCommand(ctx.obj.identity.binary_name, ctx.obj.version_info).run(extended)

    @click.command(name='health')
    @click.option('--url', type=str, default=None, help='Also check a running instance, e.g. http://localhost:8080')
    @click.pass_context
    def health(ctx, url: Optional[str]):
        """Run a self-health check."""
        HealthCommand(ctx.obj.logger, ctx.obj.version_info, ctx.obj.config).run(url)

    @click.command(name='doctor')
    @click.pass_context
    def doctor(ctx):
        """Run diagnostic checks and suggest fixes for common issues."""
        DoctorCommand(ctx.obj.logger, ctx.obj.identity).run()

    @click.command(name='envinfo')
    @click.pass_context
    def envinfo(ctx):
        """Display environment, configuration and version information."""
        EnvInfoCommand(
            ctx.obj.logger,
            ctx.obj.identity,
            ctx.obj.version_info,
            ctx.obj.config,
            ctx.obj.config_file
        ).run()

    return [version, health, doctor, envinfo]
