import click
from typing import Optional
from .command.serve import ServeCommand


def create_serve_command() -> click.Command:
    """Create the serve command."""

    @click.command(name='serve')
    @click.option('--host', type=str, default=None, help='Server host (default: server.host from config)')
    @click.option('--port', '-p', type=int, default=None, help='Server port (default: server.port from config)')
    @click.pass_context
    def serve(ctx, host: Optional[str], port: Optional[int]):
        """Start the HTTP server.

        Use Ctrl+C (SIGINT) or SIGTERM for a graceful shutdown; a second
        signal within the double-signal window forces exit.
        """
        command = ServeCommand(
            identity=ctx.obj.identity,
            config=ctx.obj.config,
            version_info=ctx.obj.version_info
        )
        command.run(host, port)

    return serve
