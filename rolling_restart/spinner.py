""" Single-character progress indicator, redrawn in place.
"""
import click


NEXT_GLYPH = {
    "|": "/",
    "/": "-",
    "-": "\\",
    "\\": "|",
}


class Spinner:
    def __init__(self, file=None, color=None):
        self.file = file
        self.color = color
        self.glyph = "|"

    def next(self):
        self.glyph = NEXT_GLYPH[self.glyph]
        click.echo(f"\r{self.glyph}", file=self.file, nl=False, color=self.color)

    def done(self):
        click.echo(click.style("\rOK", fg="green", bold=True), file=self.file, color=self.color)
