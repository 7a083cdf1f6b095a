"""
Client Configuration

Settings for the console client, read from the environment and overridden
by command line flags.

Environment:
    LINECHAT_HOST: Chat server host (default: localhost)
    LINECHAT_PORT: Chat server port (default: 1300)
    LINECHAT_TRANSPORT: ``tcp`` or ``websocket`` (default: tcp)
    LINECHAT_LOG_LEVEL: Logging level name (default: WARNING)
    LINECHAT_LOG_FILE: Log file path; empty logs to stderr
                       (default: linechat.log)
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 1300
DEFAULT_TRANSPORT = "tcp"
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_LOG_FILE = "linechat.log"


@dataclass
class ClientConfig:
    """
    Console client settings.

    Attributes:
        host: Chat server host name or IP address
        port: Chat server port
        transport: Name of the transport to use
        log_level: Logging level name
        log_file: Path of the log file, or "" to log to stderr
    """

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    transport: str = DEFAULT_TRANSPORT
    log_level: str = DEFAULT_LOG_LEVEL
    log_file: str = DEFAULT_LOG_FILE

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None
    ) -> "ClientConfig":
        """
        Build a configuration from environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ`` (for tests)

        Raises:
            ValueError: If LINECHAT_PORT is not an integer
        """
        env = os.environ if environ is None else environ
        port = env.get("LINECHAT_PORT", str(DEFAULT_PORT))
        try:
            port_number = int(port)
        except ValueError:
            raise ValueError(f"Invalid LINECHAT_PORT: {port!r}") from None

        return cls(
            host=env.get("LINECHAT_HOST", DEFAULT_HOST),
            port=port_number,
            transport=env.get("LINECHAT_TRANSPORT", DEFAULT_TRANSPORT),
            log_level=env.get("LINECHAT_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
            log_file=env.get("LINECHAT_LOG_FILE", DEFAULT_LOG_FILE),
        )
