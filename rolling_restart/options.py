""" Click definitions for various shared options and arguments.
"""
import click


def debug_option():
    return click.option("-d", "--debug", is_flag=True, help="Enables debug mode.")


def config_file_option():
    return click.option(
        "-c",
        "--config-file",
        type=click.Path(exists=True, dir_okay=False, resolve_path=True),
        help="cfctl YAML config file. Can also be set with $CFCTL_CONFIG_FILE",
    )


def max_cycles_option():
    return click.option(
        "--max-cycles",
        type=int,
        default=None,
        help="Maximum number of cycles to wait when checking for restart status. Defaults to 120 or the configured "
             "max_cycles.",
    )


def app_names_arg():
    # validated by the command so that a missing or extra name is reported like any other failure
    return click.argument("app_names", metavar="APP_NAME", nargs=-1)
