"""Configurações da aplicação - carrega variáveis do .env"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",  # carrega local
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ===========================================
    # CORE
    # ===========================================
    environment: str = "development"
    database_url: str
    secret_key: str
    access_token_expire_minutes: int = 1440
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    log_json: bool = True

    # ===========================================
    # SCHEDULER
    # ===========================================
    scheduler_timezone: str = "America/Sao_Paulo"

    # ===========================================
    # TRANSIÇÕES AUTOMÁTICAS DE LEADS
    # ===========================================
    auto_transitions_enabled: bool = True
    auto_transitions_interval_minutes: int = 5
    auto_transitions_cooldown_seconds: int = 30
    auto_transitions_startup_delay_seconds: int = 2
    auto_transitions_verbose: bool = False
    auto_transitions_batch_size: int = 500

    # ===========================================
    # PROPRIEDADES
    # ===========================================
    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def async_database_url(self) -> str:
        """
        Converte URL para formato async se necessário.

        Provedores entregam postgresql:// mas asyncpg precisa de postgresql+asyncpg://
        """
        url = self.database_url
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)
        if url.startswith("postgres://"):
            return url.replace("postgres://", "postgresql+asyncpg://", 1)
        return url


@lru_cache
def get_settings() -> Settings:
    return Settings()
