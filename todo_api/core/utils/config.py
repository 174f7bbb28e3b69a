import tomllib
from functools import cached_property
from pathlib import Path
from typing import ClassVar

from pydantic import computed_field, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from todo_api.types.exceptions import DotenvMissingVariableError


class Settings(BaseSettings):
    """
    Settings of the Todo API.

    A value is looked up, by decreasing priority, in:
    1. the keyword arguments given to the constructor
    2. the environment variables
    3. the yaml file, `config.yaml` in production
    4. the dotenv file, `.env` in production

    Tests build their own instance from `tests/config.test.yaml`. Endpoints access the settings through the `get_settings` dependency.
    See https://docs.pydantic.dev/latest/concepts/pydantic_settings/
    """

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # pydantic-settings accepts an `_env_file` argument but has no equivalent for the yaml file
    # See https://github.com/pydantic/pydantic-settings/issues/259
    _yaml_file: ClassVar[str]

    def __init__(self, _yaml_file: str, _env_file: str, **kwargs):
        Settings._yaml_file = _yaml_file
        super().__init__(_env_file=_env_file, **kwargs)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=cls._yaml_file),
            dotenv_settings,
        )

    ##########
    # Server #
    ##########

    # Debug records are only logged when enabled
    LOG_DEBUG_MESSAGES: bool = False
    # Browser origins allowed to call the API, without trailing slash. Ex: `["http://localhost:3000"]`
    CORS_ORIGINS: list[str] = []
    # Listening port of `python -m todo_api`
    PORT: int = 3000

    ############
    # Database #
    ############

    # A SQLite file, used instead of PostgreSQL for development and tests
    SQLITE_DB: str | None = None
    POSTGRES_HOST: str = ""
    POSTGRES_USER: str = ""
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = ""
    # Echo every SQL query
    DATABASE_DEBUG: bool = False

    ############
    # Accounts #
    ############

    PASSWORD_MIN_LENGTH: int = 6
    # Entropy of the session tokens, in bytes
    AUTH_TOKEN_NBYTES: int = 32
    # bcrypt cost factor. Each additional round doubles the hashing time.
    BCRYPT_ROUNDS: int = 13

    ###################
    # Computed fields #
    ###################

    @computed_field  # type: ignore[prop-decorator]
    @cached_property
    def API_VERSION(self) -> str:
        with Path("pyproject.toml").open("rb") as pyproject_file:
            return str(tomllib.load(pyproject_file)["project"]["version"])

    def _database_url(self, sqlite_driver: str, postgres_driver: str) -> str:
        if self.SQLITE_DB:
            return f"{sqlite_driver}:///./{self.SQLITE_DB}"
        return f"{postgres_driver}://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}/{self.POSTGRES_DB}"

    @computed_field  # type: ignore[prop-decorator]
    @cached_property
    def SQLALCHEMY_DATABASE_URL(self) -> str:
        """Url of the asynchronous engine used by the endpoints"""
        return self._database_url("sqlite+aiosqlite", "postgresql+asyncpg")

    @computed_field  # type: ignore[prop-decorator]
    @cached_property
    def SQLALCHEMY_DATABASE_URL_SYNC(self) -> str:
        """Url of the synchronous engine used to create and migrate the tables"""
        return self._database_url("sqlite", "postgresql+psycopg")

    ##############
    # Validation #
    ##############

    @model_validator(mode="after")
    def check_database_settings(self) -> "Settings":
        postgres_settings = (
            self.POSTGRES_HOST,
            self.POSTGRES_USER,
            self.POSTGRES_PASSWORD,
            self.POSTGRES_DB,
        )
        if not self.SQLITE_DB and not all(postgres_settings):
            raise DotenvMissingVariableError(
                "Either SQLITE_DB or POSTGRES_HOST, POSTGRES_USER, POSTGRES_PASSWORD and POSTGRES_DB",
            )
        return self

    @model_validator(mode="after")
    def check_pyproject_version(self) -> "Settings":
        """
        Read the version at startup, so that a missing `pyproject.toml` fails immediately instead of during a request
        """
        self.API_VERSION  # noqa: B018
        return self


def construct_prod_settings() -> Settings:
    """
    Return the production settings
    """
    return Settings(_env_file=".env", _yaml_file="config.yaml")
