import json
import subprocess

import pytest

from rolling_restart.cf import CfCliConnection
from rolling_restart.controller import RestartController
from rolling_restart.errors import CfError
from conftest import TWO_INSTANCES

LOGGED_IN_CONFIG = {
    "ConfigVersion": 3,
    "Target": "https://api.example.com",
    "AccessToken": "bearer abc123",
    "OrganizationFields": {"GUID": "org-guid", "Name": "my-org"},
    "SpaceFields": {"GUID": "space-guid", "Name": "dev", "AllowSSH": True},
}


@pytest.fixture
def cf_home(tmp_path, monkeypatch):
    monkeypatch.setenv("CF_HOME", str(tmp_path))
    (tmp_path / ".cf").mkdir()
    return tmp_path


def write_config(cf_home, config):
    path = cf_home / ".cf" / "config.json"
    path.write_text(config if isinstance(config, str) else json.dumps(config))


class FakeRun:
    def __init__(self, returncode=0, stdout="", stderr=""):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.calls = []

    def __call__(self, args, **kwargs):
        self.calls.append(args)
        return subprocess.CompletedProcess(args, self.returncode, stdout=self.stdout, stderr=self.stderr)


@pytest.fixture
def fake_run(monkeypatch):
    def install(**kwargs):
        run = FakeRun(**kwargs)
        monkeypatch.setattr(subprocess, "run", run)
        return run
    return install


def test_session_from_config(cf_home):
    write_config(cf_home, LOGGED_IN_CONFIG)
    connection = CfCliConnection()
    assert connection.is_logged_in()
    assert connection.has_organization()
    assert connection.has_space()


def test_session_without_target(cf_home):
    config = dict(LOGGED_IN_CONFIG, OrganizationFields={"GUID": "", "Name": ""}, SpaceFields={"GUID": "", "Name": ""})
    write_config(cf_home, config)
    connection = CfCliConnection()
    assert connection.is_logged_in()
    assert not connection.has_organization()
    assert not connection.has_space()


def test_session_logged_out(cf_home):
    write_config(cf_home, dict(LOGGED_IN_CONFIG, AccessToken=""))
    assert not CfCliConnection().is_logged_in()


def test_session_no_config(cf_home):
    assert not CfCliConnection().is_logged_in()


def test_session_cf_home_setting(tmp_path, cf_home):
    other = tmp_path / "other"
    (other / ".cf").mkdir(parents=True)
    write_config(other, LOGGED_IN_CONFIG)
    assert not CfCliConnection().is_logged_in()
    assert CfCliConnection(cf_home=str(other)).is_logged_in()


def test_session_bad_config(cf_home):
    write_config(cf_home, "{not json")
    with pytest.raises(CfError, match="Unable to read cf CLI config"):
        CfCliConnection().is_logged_in()


def test_get_app_guid(fake_run):
    run = fake_run(stdout="\n2b6b9dc6-bf0a-4a5f-9f55-0b0c3e4b6a7d\n")
    assert CfCliConnection().get_app_guid("testApp") == "2b6b9dc6-bf0a-4a5f-9f55-0b0c3e4b6a7d"
    assert run.calls == [["cf", "app", "testApp", "--guid"]]


def test_get_app_guid_empty(fake_run):
    fake_run(stdout="")
    with pytest.raises(CfError, match="No GUID returned for app testApp"):
        CfCliConnection().get_app_guid("testApp")


def test_get_app_guid_not_found(fake_run):
    fake_run(returncode=1, stdout="FAILED\n", stderr="App 'testApp' not found.\n")
    with pytest.raises(CfError, match="App 'testApp' not found."):
        CfCliConnection().get_app_guid("testApp")


def test_command_error_falls_back_to_stdout(fake_run):
    fake_run(returncode=1, stdout="FAILED\nServer error\n")
    with pytest.raises(CfError, match="Server error"):
        CfCliConnection().restart_instance("testApp", "0")


def test_get_instance_statuses(fake_run):
    run = fake_run(stdout=json.dumps(TWO_INSTANCES, indent=2))
    statuses = CfCliConnection(cf_path="/opt/cf").get_instance_statuses("valid-app-guid")
    assert statuses["1"].since == 1511990327
    assert run.calls == [["/opt/cf", "curl", "/v2/apps/valid-app-guid/instances", "-X", "GET"]]


def test_get_instance_statuses_malformed(fake_run):
    fake_run(stdout="bad response")
    with pytest.raises(CfError):
        CfCliConnection().get_instance_statuses("valid-app-guid")


def test_restart_instance(fake_run):
    run = fake_run()
    CfCliConnection().restart_instance("testApp", "1")
    assert run.calls == [["cf", "restart-app-instance", "testApp", "1"]]


def test_scale_application(fake_run):
    run = fake_run()
    CfCliConnection().scale_application("testApp", 2)
    assert run.calls == [["cf", "scale", "testApp", "-i", "2"]]


def test_missing_cf_executable(tmp_path):
    connection = CfCliConnection(cf_path=str(tmp_path / "no-such-cf"))
    with pytest.raises(CfError, match="Unable to run the cf CLI"):
        connection.scale_application("testApp", 2)


@pytest.fixture
def undecodable_cf(tmp_path):
    script = tmp_path / "cf"
    script.write_text("#!/bin/sh\nprintf '\\377\\376 guid\\n'\n")
    script.chmod(0o755)
    return str(script)


def test_undecodable_output(undecodable_cf):
    with pytest.raises(CfError, match="Unreadable output from cf app"):
        CfCliConnection(cf_path=undecodable_cf).get_app_guid("testApp")


def test_undecodable_output_aborts_restart(undecodable_cf, cf_home, console, output):
    write_config(cf_home, LOGGED_IN_CONFIG)
    controller = RestartController(CfCliConnection(cf_path=undecodable_cf), console=console)
    assert controller.run("testApp", 1) == 1
    assert output.getvalue().startswith("FAILED\nUnreadable output from cf app")
