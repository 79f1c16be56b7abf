import logging
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', extra='allow', env_prefix='payment_demo_')

    host: str = Field(default='0.0.0.0')
    port: int = Field(default=3000)
    frontend_url: str = Field(default='http://localhost:5173')
    environment: str = Field(default='development')
    log_level: str = Field(default='INFO')

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f'unknown log level "{value}"')
        return level


class YookassaSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', extra='allow', env_prefix='payment_demo_yookassa_')

    shop_id: str
    secret_key: str
    base_url: str = Field(default='https://api.yookassa.ru')
    connection_timeout_sec: float = 30.0

    # Демо никогда не должно ходить в боевой магазин
    @field_validator('secret_key')
    @classmethod
    def validate_secret_key(cls, value: str) -> str:
        if not value.startswith('test_'):
            raise ValueError('only test YooKassa keys are allowed')
        return value

    @property
    def is_test_mode(self) -> bool:
        return self.secret_key.startswith('test_')


settings = Settings()
yookassa_settings = YookassaSettings()  # type: ignore
