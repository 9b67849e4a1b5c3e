from pydantic_settings import BaseSettings

from app.services.claude import DEFAULT_MODEL


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    twilio_account_sid: str = ""
    twilio_auth_token: str = ""
    twilio_from_number: str = ""
    twilio_voice_url: str = ""
    anthropic_api_key: str = ""
    anthropic_model: str = DEFAULT_MODEL
    log_level: str = "INFO"
    max_sessions: int = 1000
