from functools import lru_cache

from pydantic_settings import BaseSettings
from pydantic import Field

from .ad.models import DEFAULT_PAGE_SIZE, DirectoryConfig


class EnvSettings(BaseSettings):
    # Directory
    server: str = Field("", alias="DIRSEARCH_SERVER")
    domain: str = Field("", alias="DIRSEARCH_DOMAIN")
    port: int = Field(636, alias="DIRSEARCH_PORT")
    use_ssl: bool = Field(True, alias="DIRSEARCH_USE_SSL")
    starttls: bool = Field(False, alias="DIRSEARCH_STARTTLS")
    bind_username: str = Field("", alias="DIRSEARCH_BIND_USER")
    bind_password: str = Field("", alias="DIRSEARCH_BIND_PASSWORD")
    base_dn: str = Field("", alias="DIRSEARCH_BASE_DN")

    # TLS validation (optional)
    tls_validate: bool = Field(False, alias="DIRSEARCH_TLS_VALIDATE")
    ca_cert_file: str = Field("", alias="DIRSEARCH_CA_CERT_FILE")

    connect_timeout_s: float = Field(10.0, alias="DIRSEARCH_CONNECT_TIMEOUT")
    page_size: int = Field(DEFAULT_PAGE_SIZE, alias="DIRSEARCH_PAGE_SIZE", ge=1)

    # Logging
    log_level: str = Field("INFO", alias="DIRSEARCH_LOG_LEVEL")
    log_dir: str = Field("data/logs", alias="DIRSEARCH_LOG_DIR")
    log_retention_days: int = Field(30, alias="DIRSEARCH_LOG_RETENTION_DAYS")

    class Config:
        populate_by_name = True
        env_file = ".env"
        extra = "ignore"


@lru_cache(maxsize=1)
def get_env() -> EnvSettings:
    return EnvSettings()


def directory_config(env: EnvSettings | None = None) -> DirectoryConfig:
    env = env or get_env()
    return DirectoryConfig(
        server=env.server,
        domain=env.domain,
        port=env.port,
        use_ssl=env.use_ssl,
        starttls=env.starttls,
        bind_username=env.bind_username,
        bind_password=env.bind_password,
        base_dn=env.base_dn,
        tls_validate=env.tls_validate,
        ca_cert_file=env.ca_cert_file,
        connect_timeout_s=env.connect_timeout_s,
        page_size=env.page_size,
    )
