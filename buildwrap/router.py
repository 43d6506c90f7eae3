"""
Command router: turns a verb and its trailing arguments into one
DispatchRequest.

Verbs are data. Each entry in VERBS names small functions that pick the
executable, transform the arguments, add environment overrides and choose
a working directory, so adding a verb means adding a table row.
"""

from __future__ import annotations

import os
import shutil
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Mapping, Sequence

from buildwrap import config_resolver, depot_tools, executor
from buildwrap.config_resolver import ActiveConfig
from buildwrap.executor import DispatchRequest, DispatchResult, StdioMode
from buildwrap.shared.errors import UsageError
from buildwrap.shared.settings import Settings

RUN_AS_NODE_ENV = "ELECTRON_RUN_AS_NODE"
NPM_NODEDIR_ENV = "npm_config_nodedir"


@dataclass(frozen=True)
class Target:
    """What a verb resolved to before environment composition."""

    executable: str
    args: tuple[str, ...]
    cwd: Path | None = None


@dataclass(frozen=True)
class DispatchContext:
    """Inputs every verb may consult."""

    config: ActiveConfig
    settings: Settings
    environ: Mapping[str, str]


@dataclass(frozen=True)
class Verb:
    """One row of the verb table."""

    name: str
    help: str
    resolve: Callable[[DispatchContext, tuple[str, ...]], Target]
    env: Callable[[DispatchContext], dict[str, str]] = lambda ctx: {}
    transform_args: Callable[[tuple[str, ...]], tuple[str, ...]] = lambda args: args
    requires_args: bool = False
    aliases: tuple[str, ...] = ()
    stdio: StdioMode = StdioMode.INHERIT


def _run_executable(ctx: DispatchContext, args: tuple[str, ...]) -> Target:
    return Target(str(ctx.config.executable), args)


def _run_npm(ctx: DispatchContext, args: tuple[str, ...]) -> Target:
    return Target("npm", args)


def _npm_env(ctx: DispatchContext) -> dict[str, str]:
    return {NPM_NODEDIR_ENV: str(ctx.config.output_dir)}


def _run_depot_tool(ctx: DispatchContext, args: tuple[str, ...]) -> Target:
    depot_dir = depot_tools.ensure(ctx.settings)
    command, rest = args[0], args[1:]
    if command in depot_tools.PYTHON_SCRIPTS:
        return Target(
            str(depot_tools.interpreter(depot_dir)),
            (str(depot_dir / command), *rest),
            cwd=depot_dir,
        )

    search_path = depot_tools.depot_env(depot_dir, ctx.environ)["PATH"]
    resolved = shutil.which(command, path=search_path) or command
    return Target(resolved, rest)


def _strip_separator(args: tuple[str, ...]) -> tuple[str, ...]:
    if args and args[0] == "--":
        return args[1:]
    return args


def _depot_env(ctx: DispatchContext) -> dict[str, str]:
    return depot_tools.depot_env(ctx.settings.depot_tools_dir, ctx.environ)


VERB_TABLE: tuple[Verb, ...] = (
    Verb(
        "start",
        "Run the built application",
        _run_executable,
        aliases=("run",),
    ),
    Verb(
        "node",
        "Run the built application as a plain Node.js runtime",
        _run_executable,
        env=lambda ctx: {RUN_AS_NODE_ENV: "1"},
    ),
    Verb(
        "npm",
        "Run npm against the headers of the current build",
        _run_npm,
        env=_npm_env,
        requires_args=True,
    ),
    Verb(
        "depot-tools",
        "Run a command from the depot tools checkout",
        _run_depot_tool,
        env=_depot_env,
        transform_args=_strip_separator,
        requires_args=True,
        aliases=("d",),
    ),
)

VERBS: dict[str, Verb] = {
    key: verb for verb in VERB_TABLE for key in (verb.name, *verb.aliases)
}


def lookup(name: str) -> Verb:
    try:
        return VERBS[name]
    except KeyError:
        raise UsageError(f"unknown command '{name}'") from None


def build_request(
    verb: Verb,
    args: Sequence[str],
    config: ActiveConfig,
    settings: Settings,
    environ: Mapping[str, str] | None = None,
) -> DispatchRequest:
    """Resolve a verb into the request the executor will run."""
    ctx = DispatchContext(config, settings, os.environ if environ is None else environ)
    target = verb.resolve(ctx, tuple(args))
    return DispatchRequest(
        executable=target.executable,
        args=target.args,
        cwd=target.cwd,
        env_overrides=verb.env(ctx),
        stdio=verb.stdio,
    )


@dataclass
class Router:
    """Resolves the active config once and hands requests to an adapter."""

    settings: Settings
    resolver: Callable[[Settings], ActiveConfig] = config_resolver.current
    adapter: Callable[[DispatchRequest], DispatchResult] = executor.run
    environ: Mapping[str, str] = field(default_factory=lambda: os.environ)

    def dispatch(self, name: str, args: Sequence[str]) -> int:
        """Run a verb and return the exit code this process should use.

        Raises:
            UsageError: For an unknown verb or missing trailing arguments.
            ConfigError: If there is no usable active configuration.
        """
        verb = lookup(name)
        args = verb.transform_args(tuple(args))
        if verb.requires_args and not args:
            raise UsageError("a command to run is required", verb.name)

        config = self.resolver(self.settings)
        request = build_request(verb, args, config, self.settings, self.environ)
        result = self.adapter(request)
        if result.error is not None:
            print(f"Error: {executor.describe_error(request, result)}", file=sys.stderr)
        return result.exit_code
