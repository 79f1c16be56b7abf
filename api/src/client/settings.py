from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class ClientSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', extra='allow', env_prefix='payment_demo_client_')

    base_url: str = Field(default='http://localhost:3000')
    poll_interval: float = Field(default=3.0)
    request_timeout: float = Field(default=10.0)


client_settings = ClientSettings()
