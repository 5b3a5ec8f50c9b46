"""Version information for ttrpg-session-logger."""

VERSION = "0.3.0"


def get_version_string():
    """Get full version string."""
    return f"ttrpg-session-logger {VERSION}"
