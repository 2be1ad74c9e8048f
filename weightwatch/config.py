from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATA_FILE = Path.home() / ".config" / "weight-watcher" / "weights.dat"
DEFAULT_OUTPUT_IMAGE = Path("/tmp/weight-watcher.png")


class Settings(BaseSettings):
    """
    Runtime configuration. Every field can be set from a WEIGHTWATCH_*
    environment variable (e.g. WEIGHTWATCH_DATA_FILE); keyword arguments
    take precedence over the environment.
    """
    model_config = SettingsConfigDict(env_prefix="WEIGHTWATCH_", env_ignore_empty=True)

    data_file: Path = DEFAULT_DATA_FILE
    output_image: Path = DEFAULT_OUTPUT_IMAGE
    gnuplot: str = "gnuplot"
    plot_timeout: float = Field(default=5.0, gt=0)
    template: str = "plot.gp"
    window_days: int = Field(default=28, ge=0)
    weight_pad: float = Field(default=5.0, ge=0)
    table_rows: int = Field(default=7, ge=0)
    host: str = "0.0.0.0"
    port: int = Field(default=9999, ge=0, le=65535)


def load_settings(**overrides) -> Settings:
    """Settings from the environment plus explicit overrides (None is ignored)."""
    settings = Settings(**{k: v for k, v in overrides.items() if v is not None})
    return settings.model_copy(
        update={
            "data_file": settings.data_file.expanduser(),
            "output_image": settings.output_image.expanduser(),
        }
    )
