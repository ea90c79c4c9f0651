""" Command line utilities for managing Cloud Foundry applications
"""

import os

import click

from rolling_restart import __version__
from rolling_restart import io
from rolling_restart import options


CONTEXT_SETTINGS = {
    "auto_envvar_prefix": "CFCTL",
    "help_option_names": ["-h", "--help"]
}

COMMAND_ALIASES = {
    "rrs": "rolling-restart",
}


cmd_folder = os.path.abspath(os.path.join(os.path.dirname(__file__), "commands"))


def set_debug(debug_opt):
    if debug_opt:
        io.DEBUG = True


def list_cmds():
    rv = []
    for filename in os.listdir(cmd_folder):
        if filename.endswith(".py") and filename.startswith("cmd_"):
            rv.append(filename[len("cmd_"): -len(".py")].replace("_", "-"))
    rv.sort()
    return rv


def name_to_command(name):
    try:
        mod_name = "rolling_restart.commands.cmd_" + name.replace("-", "_")
        mod = __import__(mod_name, None, None, ["cli"])
    except ImportError as e:
        io.error(f"Problem loading command {name}, exception {e}")
        return
    return mod.cli


class CfctlCLI(click.Group):
    def list_commands(self, ctx):
        return list_cmds()

    def get_command(self, ctx, name):
        if name in COMMAND_ALIASES:
            name = COMMAND_ALIASES[name]
        return name_to_command(name)


@click.command(cls=CfctlCLI, context_settings=CONTEXT_SETTINGS)
@click.version_option(version=__version__)
@options.debug_option()
@options.config_file_option()
@click.pass_context
def cfctl(ctx, debug, config_file):
    """Manage Cloud Foundry applications using the cf CLI's current session."""
    set_debug(debug)
    ctx.settings_kwargs = {
        "config_file": config_file,
    }
