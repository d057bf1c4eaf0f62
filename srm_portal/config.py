from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    srm_api_base_url: str
    srm_api_access_token: str
    log_level: str = "INFO"
    http_timeout_seconds: float = 30.0
    flow_ttl_seconds: int = 3600
    max_flows: int = 1000
    default_currency: str = "AED"
