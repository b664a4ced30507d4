"""
Runtime settings, read from the environment (and a local .env file).

  MCP_MANIFEST_PATH   path to the manifest JSON file
  MCP_HANDLERS        handler table, 'package.module:attr' or 'path/file.py:attr'
  MCP_SERVER_NAME     server name reported to clients (default manifest-mcp)
  MCP_SERVER_VERSION  server version reported to clients
  MCP_LOG_LEVEL       DEBUG|INFO|WARNING|ERROR (default INFO)
  MCP_TRANSPORT       stdio|http (default stdio)
  MCP_HOST / MCP_PORT HTTP bind address (default 127.0.0.1:8000)
"""

import os
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

DEFAULT_SERVER_NAME = "manifest-mcp"
DEFAULT_SERVER_VERSION = "0.1.0"


class Settings(BaseModel):
    manifest_path: Optional[str] = None
    handlers: Optional[str] = None
    server_name: str = DEFAULT_SERVER_NAME
    server_version: str = DEFAULT_SERVER_VERSION
    log_level: str = "INFO"
    transport: Literal["stdio", "http"] = "stdio"
    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=1, le=65535)

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        if dotenv:
            load_dotenv()
        values = {
            "manifest_path": os.getenv("MCP_MANIFEST_PATH"),
            "handlers": os.getenv("MCP_HANDLERS"),
            "server_name": os.getenv("MCP_SERVER_NAME"),
            "server_version": os.getenv("MCP_SERVER_VERSION"),
            "log_level": os.getenv("MCP_LOG_LEVEL"),
            "transport": os.getenv("MCP_TRANSPORT"),
            "host": os.getenv("MCP_HOST"),
            "port": os.getenv("MCP_PORT"),
        }
        return cls(**{k: v for k, v in values.items() if v is not None})

    def merged(self, **overrides) -> "Settings":
        """Copy with every non-None override applied (CLI flags win over env)."""
        return self.model_copy(update={k: v for k, v in overrides.items() if v is not None})
