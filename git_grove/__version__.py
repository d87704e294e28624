"""Version information for git-grove."""

try:
    from git_grove._version import __version__
except ImportError:
    # Fallback for development without tags or when running from source
    __version__ = "0.0.0+unknown"
