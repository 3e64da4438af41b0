from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    environment: str = "local"
    debug: bool = True
    log_level: str = "INFO"

    # Resource caps checked before any die is drawn.
    max_dice: int = 100
    max_sides: int = 1000

    # Bounds on expression size; keeps parsing and evaluation shallow.
    max_tokens: int = 200
    max_digits: int = 9

    # Per-term safety caps applied while rolling. Hitting one stops the
    # explosion/reroll chain; it is not an error.
    max_explosions: int = 100
    max_rerolls: int = 100

    # Nesting allowed for parentheses and unary signs.
    max_depth: int = 50

    # Upper bound for repeated rolls of one expression.
    max_repeat: int = 20


settings = Settings()
