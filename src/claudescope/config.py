import os
from dataclasses import dataclass


@dataclass
class Config:
    # listen_address: format ":9186" or
    # "0.0.0.0:9186", empty runs a single fetch
    listen_address: "str" = ""
    # poll interval in seconds, exporter mode only
    poll_interval: "int" = 60
    log_level: "str" = "warning"
    # "text" or "json", one-shot mode only
    output: "str" = "text"

    @classmethod
    def from_env(cls) -> "Config":
        return cls(
            listen_address=os.environ.get("CLAUDESCOPE_LISTEN_ADDRESS", ""),
            poll_interval=int(os.environ.get("CLAUDESCOPE_POLL_INTERVAL", "60")),
            log_level=os.environ.get("CLAUDESCOPE_LOG_LEVEL", "warning"),
        )

    @property
    def exporter_enabled(self) -> "bool":
        return bool(self.listen_address)
