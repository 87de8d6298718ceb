import click

from ....version import VersionInfo


class VersionCommand:
    """Prints version information."""

    def __init__(self, app_name: str, info: VersionInfo):
        self.app_name = app_name
        self.info = info

    def run(self, extended: bool = False) -> None:
        click.echo(f"{self.app_name} {self.info.version}")
        if not extended:
            return
        click.echo(f"Commit: {self.info.commit}")
        click.echo(f"Built: {self.info.build_date}")
        click.echo(f"Python: {self.info.python_version} ({self.info.implementation})")
        click.echo("")
        for name, version in self.info.dependencies.items():
            click.echo(f"{name}: {version}")
