"""Connection settings for one BIG-IP appliance."""
import os
from dataclasses import dataclass
from typing import Optional

AUTH_MODES = ("basic", "token")


@dataclass
class ApplianceConfig:
    """Configuration for a BIG-IP management endpoint."""
    name: str
    host: str
    port: int = 443
    username: str = "admin"
    password: Optional[str] = None
    password_env: str = "BIGIP_PASSWORD"
    timeout: int = 30
    retries: int = 3
    retry_delay: float = 1.0
    verify_ssl: bool = True
    auth_mode: str = "basic"  # basic, token
    login_provider: str = "tmos"

    def __post_init__(self):
        if self.auth_mode not in AUTH_MODES:
            raise ValueError(
                f"Unknown auth_mode '{self.auth_mode}' (expected one of {', '.join(AUTH_MODES)})"
            )

    def get_password(self) -> str:
        """Get password from config or environment variable."""
        if self.password:
            return self.password
        return os.environ.get(self.password_env, "")

    @property
    def base_url(self) -> str:
        if self.port == 443:
            return f"https://{self.host}"
        return f"https://{self.host}:{self.port}"
