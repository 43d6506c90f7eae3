from buildwrap.shared.errors import (
    EXIT_FAILURE,
    EXIT_USAGE,
    BuildwrapError,
    ConfigError,
    DepotToolsError,
    NoActiveConfigError,
    UpdateError,
    UsageError,
)


class TestBuildwrapError:
    def test_default_exit_code(self):
        error = BuildwrapError("boom")
        assert str(error) == "boom"
        assert error.exit_code == EXIT_FAILURE

    def test_explicit_exit_code(self):
        assert BuildwrapError("boom", exit_code=5).exit_code == 5


class TestConfigError:
    def test_init_no_path(self):
        error = ConfigError("bad value")
        assert str(error) == "bad value"
        assert error.config_path is None
        assert error.exit_code == EXIT_USAGE

    def test_init_with_path(self):
        error = ConfigError("bad value", "configs/evm.testing.yaml")
        assert str(error) == "[configs/evm.testing.yaml] bad value"


class TestNoActiveConfigError:
    def test_is_config_error(self):
        error = NoActiveConfigError()
        assert isinstance(error, ConfigError)
        assert "No active build configuration" in str(error)
        assert error.exit_code == EXIT_USAGE


class TestUsageError:
    def test_with_verb(self):
        error = UsageError("a command to run is required", "npm")
        assert str(error) == "npm: a command to run is required"
        assert error.verb == "npm"
        assert error.exit_code == EXIT_USAGE

    def test_without_verb(self):
        assert str(UsageError("unknown command 'x'")) == "unknown command 'x'"


class TestToolErrors:
    def test_exit_codes(self):
        assert DepotToolsError("x").exit_code == EXIT_FAILURE
        assert UpdateError("x").exit_code == EXIT_FAILURE
