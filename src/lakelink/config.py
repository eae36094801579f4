"""Application settings loaded from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All configuration is loaded from environment variables prefixed with LL_."""

    # Inputs / outputs
    specimen_path: str = ""
    survey_path: str = ""
    overrides_path: str = ""
    output_path: str = ""

    # Specimen filtering policy
    state_province: str = "Michigan"
    min_year: int = 1915
    max_year: int = 1995

    # Two-digit years accepted from field numbers (19 -> 1919 ... 96 -> 1996)
    field_year_min: int = 19
    field_year_max: int = 96

    model_config = {"env_file": ".env", "env_prefix": "LL_"}


def get_settings() -> Settings:
    """Return a Settings instance."""
    return Settings()
