import click

from rolling_restart import options
from rolling_restart.cf import CfCliConnection
from rolling_restart.controller import app_name_from_args, max_cycles_from_args, RestartController
from rolling_restart.errors import UsageError
from rolling_restart.settings import load_settings


@click.command("rolling-restart")
@options.max_cycles_option()
@options.app_names_arg()
@click.pass_context
def cli(ctx, max_cycles, app_names):
    """Restart instances of your application one at a time for zero downtime.

    Each instance of APP_NAME is restarted in turn, and the next one is only restarted once the previous one is
    running again. An application with a single instance is scaled up to 2 instances for the duration of the restart.

    Also available as `rrs`.
    """
    settings = load_settings(**ctx.parent.settings_kwargs)
    connection = CfCliConnection(cf_path=settings.cf_path, cf_home=settings.cf_home)
    controller = RestartController(
        connection,
        poll_interval=settings.poll_interval,
        healthy_uptime=settings.healthy_uptime,
    )
    try:
        app_name = app_name_from_args(app_names)
        max_cycles = max_cycles_from_args(max_cycles, settings.max_cycles)
    except UsageError as exc:
        ctx.exit(controller.abort(exc))
    ctx.exit(controller.run(app_name, max_cycles))
