""" Access to the Cloud Foundry platform through the cf CLI's authenticated session
"""
import json
import os
import subprocess
from abc import ABCMeta, abstractmethod

import rolling_restart.io
from rolling_restart.errors import CfError
from rolling_restart.state import parse_instance_statuses


class CliConnection(metaclass=ABCMeta):
    """The platform operations a rolling restart needs. Failures raise ``CfError``."""

    @abstractmethod
    def is_logged_in(self):
        """ """

    @abstractmethod
    def has_organization(self):
        """ """

    @abstractmethod
    def has_space(self):
        """ """

    @abstractmethod
    def get_app_guid(self, app_name):
        """ """

    @abstractmethod
    def get_instance_statuses(self, app_guid):
        """Return a fresh ``InstanceStatusMap`` for the app."""

    @abstractmethod
    def restart_instance(self, app_name, instance_key):
        """ """

    @abstractmethod
    def scale_application(self, app_name, instance_count):
        """ """


class CfCliConnection(CliConnection):

    def __init__(self, cf_path="cf", cf_home=None):
        self.cf_path = cf_path
        self.cf_home = cf_home

    @property
    def config_path(self):
        cf_home = self.cf_home or os.environ.get("CF_HOME") or os.path.expanduser("~")
        return os.path.join(cf_home, ".cf", "config.json")

    def __read_config(self):
        path = self.config_path
        if not os.path.exists(path):
            rolling_restart.io.debug("No cf config found at %s", path)
            return {}
        try:
            with open(path) as fh:
                config = json.load(fh)
        except (OSError, ValueError) as exc:
            raise CfError(f"Unable to read cf CLI config {path}: {exc}")
        if not isinstance(config, dict):
            raise CfError(f"Unable to read cf CLI config {path}: not a JSON object")
        return config

    def __config_guid(self, section):
        fields = self.__read_config().get(section) or {}
        return bool(fields.get("GUID"))

    def __cf(self, *args):
        args = [self.cf_path] + list(args)
        rolling_restart.io.debug("Calling cf with args: %s", args[1:])
        try:
            proc = subprocess.run(args, capture_output=True, text=True, encoding="utf-8")
        except OSError as exc:
            raise CfError(f"Unable to run the cf CLI ({self.cf_path}): {exc}")
        except UnicodeDecodeError as exc:
            raise CfError(f"Unreadable output from cf {args[1]}: {exc}")
        if proc.returncode != 0:
            message = proc.stderr.strip() or proc.stdout.strip() or f"cf {args[1]} exited with status {proc.returncode}"
            raise CfError(message)
        return proc.stdout

    def is_logged_in(self):
        return bool(self.__read_config().get("AccessToken"))

    def has_organization(self):
        return self.__config_guid("OrganizationFields")

    def has_space(self):
        return self.__config_guid("SpaceFields")

    def get_app_guid(self, app_name):
        output = self.__cf("app", app_name, "--guid")
        for line in output.splitlines():
            if line.strip():
                return line.strip()
        raise CfError(f"No GUID returned for app {app_name}")

    def get_instance_statuses(self, app_guid):
        output = self.__cf("curl", f"/v2/apps/{app_guid}/instances", "-X", "GET")
        return parse_instance_statuses(output)

    def restart_instance(self, app_name, instance_key):
        self.__cf("restart-app-instance", app_name, str(instance_key))

    def scale_application(self, app_name, instance_count):
        self.__cf("scale", app_name, "-i", str(instance_count))
