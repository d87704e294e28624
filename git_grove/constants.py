"""Shared constants for git-grove."""

from typing import List


# Tree definition document names, in lookup order
CONFIG_FILE_NAMES: List[str] = ["grove.yaml", ".grove.yaml", "grove.yml", ".grove.yml"]
DEFAULT_CONFIG_FILE = CONFIG_FILE_NAMES[0]

# Directory under each level that holds the level's repositories
DEFAULT_REPOS_DIR = "repos"

ROOT_PATH = "/"
PATH_SEPARATOR = "/"

DEFAULT_REMOTE = "origin"

# Repository name suffixes that mark a meta-repository; "auto" fetch clones these eagerly
EAGER_NAME_SUFFIXES: List[str] = [
    "-monorepo",
    "-metarepo",
    "-platform",
    "-workspace",
    "-root-repo",
    "-grove",
]

WORKSPACE_ENV_VAR = "GIT_GROVE_WORKSPACE"


# Symbol constants
SYMBOL_CLONED = "✓"
SYMBOL_LAZY = "💤"
SYMBOL_CONFIG = "📄"
SYMBOL_FAILED = "✗"


# Status line prefixes for changed files
FILE_STATUS_PREFIX = {
    "staged": "+",
    "untracked": "?",
    "modified": "M",
    "deleted": "D",
    "added": "A",
}


# CLI colors (Rich color names)
CLI_COLORS = {
    "clean": "green",
    "dirty": "yellow",
    "failed": "red",
    "lazy": "dim",
    "config": "cyan",
}
