"""
Configuration model produced by the XML configuration parser.

All models are frozen: once the parser has produced a Configuration,
nothing downstream can change it.
"""
from typing import Dict, Any, Optional, Tuple, Literal

from pydantic import BaseModel, Field, field_validator
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError


class Settings(BaseModel):
    """Runtime settings from the ``<settings>`` section."""

    model_config = {"frozen": True, "extra": "forbid", "populate_by_name": True}

    cache_enabled: bool = Field(True, alias="cacheEnabled")
    lazy_loading_enabled: bool = Field(False, alias="lazyLoadingEnabled")
    use_generated_keys: bool = Field(False, alias="useGeneratedKeys")
    default_executor_type: Literal["SIMPLE", "REUSE", "BATCH"] = Field("SIMPLE", alias="defaultExecutorType")
    default_statement_timeout: Optional[int] = Field(None, alias="defaultStatementTimeout", ge=0)
    default_fetch_size: Optional[int] = Field(None, alias="defaultFetchSize", ge=0)
    map_underscore_to_camel_case: bool = Field(False, alias="mapUnderscoreToCamelCase")
    local_cache_scope: Literal["SESSION", "STATEMENT"] = Field("SESSION", alias="localCacheScope")
    log_prefix: Optional[str] = Field(None, alias="logPrefix")


class DataSource(BaseModel):
    """Connection settings of an environment's ``<dataSource>``."""

    model_config = {"frozen": True}

    type: Literal["POOLED", "UNPOOLED"] = "POOLED"
    url: str
    username: Optional[str] = None
    password: Optional[str] = Field(None, repr=False)
    pool_size: Optional[int] = Field(None, gt=0)
    pool_timeout: Optional[float] = Field(None, ge=0)
    properties: Dict[str, str] = Field(default_factory=dict)

    @field_validator("url")
    @classmethod
    def _validate_url(cls, value: str) -> str:
        try:
            make_url(value)
        except ArgumentError as e:
            raise ValueError(f"invalid database URL: {e}") from e
        return value

    def to_url(self) -> URL:
        """SQLAlchemy URL with the username and password applied."""
        url = make_url(self.url)
        if self.username is not None:
            url = url.set(username=self.username)
        if self.password is not None:
            url = url.set(password=self.password)
        return url


class Environment(BaseModel):
    """The active ``<environment>`` block."""

    model_config = {"frozen": True}

    id: str
    transaction_manager: Literal["JDBC", "MANAGED"] = "JDBC"
    data_source: DataSource


class Configuration(BaseModel):
    """
    Fully resolved configuration.

    Attributes:
        variables: Properties after merging the document, the properties
            resource and the caller's overrides
        settings: Runtime settings
        type_aliases: Lower-cased alias to the imported object
        environment: The selected environment, if the document defines any
        mappers: Mapper references in declaration order
    """

    model_config = {"frozen": True}

    variables: Dict[str, str] = Field(default_factory=dict)
    settings: Settings = Field(default_factory=Settings)
    type_aliases: Dict[str, Any] = Field(default_factory=dict)
    environment: Optional[Environment] = None
    mappers: Tuple[str, ...] = ()

    def resolve_alias(self, alias: str) -> Any:
        """
        Returns the object registered under a type alias.

        Args:
            alias: Alias name (case-insensitive)

        Returns:
            The imported object
        """
        try:
            return self.type_aliases[alias.lower()]
        except KeyError:
            raise KeyError(f"Unknown type alias: {alias}") from None
