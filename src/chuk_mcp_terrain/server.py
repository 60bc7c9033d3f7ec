#!/usr/bin/env python3
"""
Terrain MCP Server - Entry Point

This module provides the async MCP server for ASCII Grid DEM loading,
terrain meshing, and raindrop flow simulation.
Supports both stdio (for Claude Desktop) and HTTP (for API access) transports.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .constants import EnvVar, SessionProvider, StorageProvider

# Load environment variables from .env file
env_path = Path(__file__).parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)

logger = logging.getLogger(__name__)

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 8004


def _resolve_provider() -> str | None:
    """
    Pick the storage provider from the environment.

    Returns:
        Provider name, or None if the configured provider cannot be used
    """
    provider = os.environ.get(EnvVar.ARTIFACTS_PROVIDER, StorageProvider.MEMORY)

    if provider == StorageProvider.S3:
        required = [EnvVar.BUCKET_NAME, EnvVar.AWS_ACCESS_KEY_ID, EnvVar.AWS_SECRET_ACCESS_KEY]
        missing = [name for name in required if not os.environ.get(name)]
        if missing:
            logger.warning(f"S3 provider configured but missing: {', '.join(missing)}")
            return None
        logger.info(f"  Endpoint: {os.environ.get(EnvVar.AWS_ENDPOINT_URL_S3)}")

    elif provider == StorageProvider.FILESYSTEM:
        artifacts_path = os.environ.get(EnvVar.ARTIFACTS_PATH)
        if not artifacts_path:
            logger.warning(
                f"Filesystem provider configured but {EnvVar.ARTIFACTS_PATH} not set. "
                "Defaulting to memory provider."
            )
            return StorageProvider.MEMORY
        Path(artifacts_path).mkdir(parents=True, exist_ok=True)

    return provider


def _init_artifact_store() -> bool:
    """
    Initialize the artifact store from environment variables.

    Exported tiles and previews are written here; loading from an
    artifact reference reads from it.

    Returns:
        True if artifact store was initialized, False otherwise
    """
    provider = _resolve_provider()
    if provider is None:
        return False

    redis_url = os.environ.get(EnvVar.REDIS_URL)
    store_kwargs: dict[str, Any] = {
        "storage_provider": provider,
        "session_provider": SessionProvider.REDIS if redis_url else SessionProvider.MEMORY,
    }
    if provider == StorageProvider.S3:
        store_kwargs["bucket"] = os.environ.get(EnvVar.BUCKET_NAME)
    elif provider == StorageProvider.FILESYSTEM:
        store_kwargs["bucket"] = os.environ.get(EnvVar.ARTIFACTS_PATH)

    try:
        from chuk_artifacts import ArtifactStore
        from chuk_mcp_server import set_global_artifact_store

        set_global_artifact_store(ArtifactStore(**store_kwargs))
        logger.info(
            f"Artifact store initialized (provider: {provider}, "
            f"sessions: {store_kwargs['session_provider']})"
        )
        return True

    except Exception as e:
        logger.error(f"Failed to initialize artifact store: {e}")
        return False


# Import mcp instance and all registered tools from async server
from .async_server import mcp  # noqa: F401, E402


def _run(stdio: bool, host: str, port: int, reason: str = "") -> None:
    if stdio:
        print(f"Terrain MCP Server starting in STDIO mode{reason}", file=sys.stderr)
        mcp.run(stdio=True)
    else:
        print(f"Terrain MCP Server starting in HTTP mode on {host}:{port}", file=sys.stderr)
        mcp.run(host=host, port=port, stdio=False)


def main() -> None:
    """Main entry point for the MCP server."""
    import argparse

    # Initialize artifact store at startup, not at import time
    _init_artifact_store()

    parser = argparse.ArgumentParser(description="Terrain MCP Server")
    parser.add_argument(
        "mode",
        nargs="?",
        choices=["stdio", "http"],
        default=None,
        help="Transport mode (stdio for Claude Desktop, http for API)",
    )
    parser.add_argument(
        "--host", default=DEFAULT_HOST, help=f"Host for HTTP mode (default: {DEFAULT_HOST})"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=DEFAULT_PORT,
        help=f"Port for HTTP mode (default: {DEFAULT_PORT})",
    )

    args = parser.parse_args()

    if args.mode is not None:
        _run(args.mode == "stdio", args.host, args.port)
    elif os.environ.get(EnvVar.MCP_STDIO) or (not sys.stdin.isatty()):
        _run(True, args.host, args.port, reason=" (auto-detected)")
    else:
        _run(False, args.host, args.port)


if __name__ == "__main__":
    main()
