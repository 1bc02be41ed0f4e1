# Keep in sync with pyproject.toml [project] version.

__version__ = "0.1.0"

# Current version of the Rewrite API.
API_VERSION = "1"
