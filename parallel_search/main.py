"""Main entry point for the Parallel Search server."""

import argparse
import os

from .config import get_settings
from .server import SearchServer


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Parallel Search MCP server")
    parser.add_argument(
        "--transport",
        choices=["streamable-http", "stdio"],
        help="Transport protocol (streamable-http or stdio)",
    )
    parser.add_argument(
        "--host",
        help="Host address to bind server (for HTTP transport)",
    )
    parser.add_argument(
        "--port",
        type=int,
        help="Port to bind server (for HTTP transport)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level",
    )
    parser.add_argument("--dataforseo-login", help="DataForSEO API login")
    parser.add_argument("--dataforseo-password", help="DataForSEO API password")
    parser.add_argument("--brave-api-key", help="Brave Search subscription token")

    return parser.parse_args(argv)


# Argument name -> environment variable read by AppSettings
ENV_OVERRIDES = {
    "transport": "TRANSPORT",
    "host": "HOST",
    "port": "PORT",
    "log_level": "LOG_LEVEL",
    "dataforseo_login": "DATAFORSEO__LOGIN",
    "dataforseo_password": "DATAFORSEO__PASSWORD",
    "brave_api_key": "BRAVE__API_KEY",
}


def apply_overrides(args: argparse.Namespace) -> None:
    """Export command-line values so settings pick them up."""
    for arg, env_var in ENV_OVERRIDES.items():
        value = getattr(args, arg, None)
        if value:
            os.environ[env_var] = str(value)


def main(argv=None):
    """Run the FastMCP search server."""
    args = parse_args(argv)
    apply_overrides(args)

    # Settings are cached; drop anything loaded before the overrides
    get_settings.cache_clear()
    settings = get_settings()

    server = SearchServer(settings=settings)
    server.run(
        transport=settings.transport,
        host=settings.host,
        port=settings.port,
    )


if __name__ == "__main__":
    main()
