import sys
import traceback

import click

from rolling_restart.spinner import Spinner


DEBUG = False


def debug(message, *args):
    if args:
        message = message % args
    if DEBUG:
        click.echo(message)


def error(message, *args):
    if args:
        message = message % args
    if DEBUG and sys.exc_info()[0] is not None:
        click.echo(traceback.format_exc(), nl=False)
    click.echo(click.style(message, bold=True, fg="red"), err=True)


def exception(message):
    raise click.ClickException(click.style(message, bold=True, fg="red"))


class Console:
    """Line-oriented operator output for a single restart run.

    Everything the restart workflow prints goes through one of these so that it can be pointed at any file-like
    object. ``file=None`` means stdout, ``color=None`` lets click decide whether to emit ANSI styles.
    """

    def __init__(self, file=None, color=None):
        self.file = file
        self.color = color
        self.spinner = Spinner(file=file, color=color)

    def echo(self, message, *args):
        if args:
            message = message % args
        click.echo(message, file=self.file, color=self.color)

    def warn(self, message, *args):
        if args:
            message = message % args
        click.echo(click.style(message, fg="yellow"), file=self.file, color=self.color)

    def failed(self, message):
        click.echo(click.style("FAILED", fg="red", bold=True), file=self.file, color=self.color)
        click.echo(message, file=self.file, color=self.color)
