from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

REPO_ROOT = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    root: Path = REPO_ROOT
    manifest_path: Optional[Path] = None

    fix: bool = False
    skip_validate: bool = False

    hash_chunk_size: int = 1024 * 1024
    manifest_schema: int = 1

    model_config = SettingsConfigDict(frozen=True)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Options come from the command line only
        return (init_settings,)

    @property
    def root_dir(self) -> Path:
        return self.root.expanduser().resolve()

    @property
    def devices_dir(self) -> Path:
        return self.root_dir / "devices"

    @property
    def manifest_file(self) -> Path:
        if self.manifest_path is not None:
            return self.manifest_path.expanduser().resolve()
        return self.root_dir / "manifest.json"
