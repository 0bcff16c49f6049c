"""
Configuration settings for the wallet service.
Loads environment variables and provides application settings.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    """
    
    # Database
    DATABASE_URL: str
    SQL_ECHO: bool = False
    
    # Security
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    BCRYPT_ROUNDS: int = 12
    
    # API
    API_V1_PREFIX: str = "/api/v1"
    PROJECT_NAME: str = "Wallet Ledger Service"
    VERSION: str = "1.0.0"
    DESCRIPTION: str = "Digital wallet backend: balances, transfers, top-ups and an append-only ledger"
    LOG_LEVEL: str = "INFO"
    
    # Registration
    MINIMUM_AGE: int = 18
    STARTING_BALANCE: int = 100
    
    # Ledger limits (minor units)
    DEPOSIT_MIN_AMOUNT: int = 10
    DEPOSIT_MAX_AMOUNT: int = 50_000
    WITHDRAW_MIN_AMOUNT: int = 10
    WITHDRAW_MAX_AMOUNT: int = 25_000
    TRANSFER_MIN_AMOUNT: int = 10
    TRANSFER_MAX_AMOUNT: int = 25_000
    TOPUP_MIN_AMOUNT: int = 10
    WALLET_LOAD_MIN_AMOUNT: int = 10
    CROSS_INSTITUTION_FEE: int = 11
    
    # Concurrency
    LOCK_TIMEOUT_SECONDS: float = 5.0
    MAX_CONFLICT_RETRIES: int = 3
    
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)


# Create global settings instance
settings = Settings()
