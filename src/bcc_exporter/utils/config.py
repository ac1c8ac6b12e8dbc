from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = 8080
    password: str = ""              # empty disables basic auth
    max_seconds: int = 300
    sample_frequency: int = 999
    use_sudo: bool = True           # profile-bpfcc needs root
    proc_root: str = "/proc"
    workspace_prefix: str = "bcc-exporter-"
    stream_chunk_size: int = 64 * 1024
    log_dir: str = "logs"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="BCC_EXPORTER_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

@lru_cache
def get_settings() -> Settings:
    return Settings()  # env vars automatically picked up
