"""Static command tables used by the correction strategies."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

# Known subcommands for well-known tools
COMMON_SUBCOMMANDS: Mapping[str, frozenset[str]] = MappingProxyType({
    "git": frozenset({
        "add", "bisect", "branch", "checkout", "clone", "commit", "diff",
        "fetch", "init", "log", "merge", "mv", "pull", "push", "rebase",
        "revert", "rm", "show", "stash", "status", "switch", "tag",
    }),
    "npm": frozenset({
        "install", "init", "run", "test", "publish", "link", "login",
        "logout", "ci", "config", "cache", "start", "stop", "restart",
        "update", "outdated", "list", "prune", "exec", "root", "pack",
        "uninstall",
    }),
    "yarn": frozenset({
        "add", "install", "remove", "run", "test", "init", "upgrade",
        "global", "dlx", "config", "list",
    }),
    "pnpm": frozenset({
        "add", "install", "update", "remove", "run", "exec", "list",
        "publish", "install-test", "fetch",
    }),
    "pip": frozenset({
        "install", "uninstall", "list", "freeze", "show", "search", "cache",
        "config",
    }),
    "docker": frozenset({
        "build", "commit", "compose", "cp", "create", "diff", "events",
        "exec", "images", "info", "inspect", "kill", "load", "logs", "pause",
        "port", "ps", "pull", "push", "rename", "restart", "rm", "rmi", "run",
        "save", "start", "stats", "stop", "tag", "top", "unpause", "update",
        "version",
    }),
    "kubectl": frozenset({
        "apply", "get", "describe", "delete", "logs", "exec", "create",
        "edit", "explain", "expose", "port-forward", "top", "cp", "scale",
        "rollout", "set", "label", "annotate", "cordon", "drain", "uncordon",
    }),
    "gh": frozenset({
        "auth", "repo", "issue", "pr", "gist", "alias", "api", "search",
        "run", "workflow", "status", "label",
    }),
})

SUBCOMMAND_BASES = frozenset(COMMON_SUBCOMMANDS)

# Bases whose `run <script>` form reads scripts from package.json
SCRIPT_RUNNERS = frozenset({"npm", "yarn", "pnpm"})

VCS_BASES = frozenset({"git"})
BRANCH_SUBCOMMANDS = frozenset({"checkout", "switch"})

DEFAULT_PRIORITY_BASES = frozenset({
    "git", "npm", "yarn", "pnpm", "node", "python", "python3", "pip", "pip3",
    "docker", "kubectl", "gh", "go", "cargo", "dotnet", "java", "mvn",
    "gradle",
})


def subcommands_for(base: str) -> frozenset[str]:
    """Known subcommands for ``base``, empty when the tool is not listed."""
    return COMMON_SUBCOMMANDS.get(base, frozenset())
