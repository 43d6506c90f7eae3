import os
from pathlib import Path
from unittest.mock import patch

import pytest

from buildwrap import depot_tools
from buildwrap.config_resolver import ActiveConfig
from buildwrap.executor import DispatchResult, StdioMode
from buildwrap.router import (
    NPM_NODEDIR_ENV,
    RUN_AS_NODE_ENV,
    VERBS,
    Router,
    build_request,
    lookup,
)
from buildwrap.shared.errors import NoActiveConfigError, UsageError
from buildwrap.shared.settings import Settings

CONFIG = ActiveConfig("testing", Path("/src/electron"), "Testing", "electron")
BASE_ENV = {"PATH": "/usr/bin", "HOME": "/home/dev", "LANG": "C"}


class SpyAdapter:
    def __init__(self, result=DispatchResult(0)):
        self.result = result
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        return self.result


@pytest.fixture
def settings(tmp_path):
    return Settings(home=tmp_path, depot_tools_dir=tmp_path / "depot_tools")


def make_router(settings, adapter, resolver=lambda s: CONFIG):
    return Router(settings, resolver=resolver, adapter=adapter, environ=BASE_ENV)


class TestVerbTable:
    def test_aliases(self):
        assert VERBS["run"] is VERBS["start"]
        assert VERBS["d"] is VERBS["depot-tools"]

    @pytest.mark.parametrize("name,required", [("start", False), ("node", False), ("npm", True), ("d", True)])
    def test_requires_args(self, name, required):
        assert VERBS[name].requires_args is required

    def test_lookup_unknown(self):
        with pytest.raises(UsageError, match="unknown command"):
            lookup("frobnicate")


class TestBuildRequest:
    def test_start(self, settings):
        request = build_request(VERBS["start"], ["--foo", "bar"], CONFIG, settings, BASE_ENV)

        assert request.executable == str(CONFIG.executable)
        assert request.args == ("--foo", "bar")
        assert request.env_overrides == {}
        assert request.cwd is None
        assert request.stdio is StdioMode.INHERIT

    def test_node_sets_marker_only(self, settings):
        request = build_request(VERBS["node"], ["-e", "1"], CONFIG, settings, BASE_ENV)

        assert request.executable == str(CONFIG.executable)
        assert request.env_overrides == {RUN_AS_NODE_ENV: "1"}

    def test_npm(self, settings):
        request = build_request(VERBS["npm"], ["install", "--verbose"], CONFIG, settings, BASE_ENV)

        assert request.executable == "npm"
        assert request.args == ("install", "--verbose")
        assert request.env_overrides == {NPM_NODEDIR_ENV: str(CONFIG.output_dir)}

    @patch("buildwrap.router.depot_tools.ensure")
    def test_depot_python_script(self, mock_ensure, settings):
        depot_dir = settings.depot_tools_dir
        mock_ensure.return_value = depot_dir

        request = build_request(VERBS["d"], ["gclient.py", "sync", "-f"], CONFIG, settings, BASE_ENV)

        assert request.executable == str(depot_tools.interpreter(depot_dir))
        assert request.args == (str(depot_dir / "gclient.py"), "sync", "-f")
        assert request.cwd == depot_dir
        assert request.env_overrides[depot_tools.ACCEPT_TOS_ENV] == "1"
        assert request.env_overrides["PATH"] == f"{depot_dir}{os.pathsep}/usr/bin"
        mock_ensure.assert_called_once_with(settings)

    @patch("buildwrap.router.shutil.which")
    @patch("buildwrap.router.depot_tools.ensure")
    def test_depot_other_command(self, mock_ensure, mock_which, settings):
        depot_dir = settings.depot_tools_dir
        mock_ensure.return_value = depot_dir
        mock_which.return_value = str(depot_dir / "autoninja")

        request = build_request(VERBS["d"], ["autoninja", "-C", "out"], CONFIG, settings, BASE_ENV)

        assert request.executable == str(depot_dir / "autoninja")
        assert request.args == ("-C", "out")
        assert request.cwd is None
        _, kwargs = mock_which.call_args
        assert kwargs["path"].startswith(str(depot_dir))

    @patch("buildwrap.router.shutil.which", return_value=None)
    @patch("buildwrap.router.depot_tools.ensure")
    def test_depot_unresolved_command_passed_through(self, mock_ensure, mock_which, settings):
        mock_ensure.return_value = settings.depot_tools_dir
        request = build_request(VERBS["d"], ["gsutil"], CONFIG, settings, BASE_ENV)
        assert request.executable == "gsutil"


class TestRouterDispatch:
    def test_exit_code_relayed(self, settings):
        adapter = SpyAdapter(DispatchResult(7))
        assert make_router(settings, adapter).dispatch("start", []) == 7

    def test_node_child_env(self, settings):
        adapter = SpyAdapter()
        make_router(settings, adapter).dispatch("node", ["script.js"])

        (request,) = adapter.requests
        child_env = {**BASE_ENV, **request.env_overrides}
        assert child_env[RUN_AS_NODE_ENV] == "1"
        assert {k: v for k, v in child_env.items() if k != RUN_AS_NODE_ENV} == BASE_ENV

    @pytest.mark.parametrize("verb", ["npm", "depot-tools", "d"])
    def test_pass_through_without_args(self, settings, verb):
        adapter = SpyAdapter()
        with pytest.raises(UsageError):
            make_router(settings, adapter).dispatch(verb, [])
        assert adapter.requests == []

    @patch("buildwrap.router.depot_tools.ensure")
    def test_depot_only_separator(self, mock_ensure, settings):
        adapter = SpyAdapter()
        with pytest.raises(UsageError):
            make_router(settings, adapter).dispatch("d", ["--"])
        mock_ensure.assert_not_called()
        assert adapter.requests == []

    @patch("buildwrap.router.depot_tools.ensure")
    def test_depot_separator_stripped(self, mock_ensure, settings):
        mock_ensure.return_value = settings.depot_tools_dir
        adapter = SpyAdapter()

        make_router(settings, adapter).dispatch("d", ["--", "gn.py", "--help"])

        (request,) = adapter.requests
        assert request.args == (str(settings.depot_tools_dir / "gn.py"), "--help")

    def test_usage_error_before_config_lookup(self, settings):
        def resolver(s):
            raise AssertionError("config must not be resolved")

        with pytest.raises(UsageError):
            make_router(settings, SpyAdapter(), resolver).dispatch("npm", [])

    def test_no_active_config(self, settings):
        def resolver(s):
            raise NoActiveConfigError()

        adapter = SpyAdapter()
        with pytest.raises(NoActiveConfigError):
            make_router(settings, adapter, resolver).dispatch("start", [])
        assert adapter.requests == []

    def test_spawn_error_reported(self, settings, capsys):
        adapter = SpyAdapter(DispatchResult(127, FileNotFoundError()))

        assert make_router(settings, adapter).dispatch("start", []) == 127
        assert "Command not found" in capsys.readouterr().err

    def test_resolver_called_once(self, settings):
        calls = []

        def resolver(s):
            calls.append(s)
            return CONFIG

        make_router(settings, SpyAdapter(), resolver).dispatch("run", ["x"])
        assert calls == [settings]
