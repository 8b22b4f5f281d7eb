from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Penalty runs credited to extras on top of any runs run
    wide_penalty: int = 1
    no_ball_penalty: int = 1

    # Used when a match config names neither overs nor a fixed-length format
    default_overs: int = 20

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
