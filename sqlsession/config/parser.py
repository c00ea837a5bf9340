"""
XML configuration parser.

Reads a ``<configuration>`` document from a text or byte stream and
produces a frozen Configuration. A document looks like:

```xml
<configuration>
  <properties resource="db.properties">
    <property name="pool" value="POOLED"/>
  </properties>
  <settings>
    <setting name="defaultStatementTimeout" value="${timeout:25}"/>
  </settings>
  <typeAliases>
    <typeAlias alias="Path" type="pathlib.Path"/>
  </typeAliases>
  <environments default="dev">
    <environment id="dev">
      <transactionManager type="JDBC"/>
      <dataSource type="${pool}">
        <property name="url" value="${url}"/>
        <property name="username" value="${username}"/>
        <property name="password" value="${password}"/>
      </dataSource>
    </environment>
  </environments>
  <mappers>
    <mapper resource="mappers/user.xml"/>
  </mappers>
</configuration>
```
"""
import importlib
import logging
import xml.etree.ElementTree as ET

from pathlib import Path
from typing import Dict, Any, IO, Iterator, List, Mapping, Optional

from pydantic import ValidationError

from sqlsession.config.model import Configuration, DataSource, Environment, Settings
from sqlsession.config.properties import load_properties, resolve_placeholders
from sqlsession.core.common import ConfigParseError, PropertiesDict, describe
from sqlsession.core.error_context import ErrorContext
from sqlsession.utils.encrypter import ConfigEncrypter, is_encrypted

logger = logging.getLogger(__name__)

_SETTING_NAMES = frozenset(field.alias for field in Settings.model_fields.values())


class XMLConfigParser:
    """
    Single-use parser turning a configuration stream into a Configuration.

    Sections are processed in a fixed order (properties, settings,
    typeAliases, environments, mappers) whatever their order in the
    document, so that every attribute can reference the resolved
    properties.
    """

    SECTIONS = ("properties", "settings", "typeAliases", "environments", "mappers")

    def __init__(self, source: IO, environment: Optional[str] = None,
                 properties: Optional[Mapping[str, str]] = None,
                 encrypter: Optional[ConfigEncrypter] = None):
        """
        Initializes the parser.

        Args:
            source: Text or byte stream containing the XML document
            environment: Environment id to activate (the document's default if None)
            properties: Overrides applied on top of the document's properties
            encrypter: Encrypter for ``ENC(...)`` values (created on demand if None)
        """
        self.source = source
        self.environment = environment
        self.overrides: PropertiesDict = dict(properties) if properties else {}
        self.resource = describe(source)
        self.base_path = self._source_directory(source)
        self._encrypter = encrypter
        self._variables: PropertiesDict = {}
        self._parsed = False

    def parse(self) -> Configuration:
        """
        Parses the document.

        Returns:
            The resolved configuration

        Raises:
            ConfigParseError: If the document is malformed or invalid
        """
        if self._parsed:
            raise ConfigParseError("Each XMLConfigParser can only be used once.")
        self._parsed = True

        ErrorContext.instance().resource(self.resource)
        logger.debug(f"Parsing configuration from {self.resource}")

        self._activity("checking property overrides")
        self._check_overrides()
        sections = self._read_sections()

        self._activity("parsing properties")
        self._variables = self._parse_properties(sections.get("properties"))

        self._activity("parsing settings")
        settings = self._parse_settings(sections.get("settings"))

        self._activity("parsing type aliases")
        type_aliases = self._parse_type_aliases(sections.get("typeAliases"))

        self._activity("parsing environments")
        environment = self._parse_environments(sections.get("environments"))

        self._activity("parsing mappers")
        mappers = self._parse_mappers(sections.get("mappers"))

        return Configuration(
            variables=self._variables,
            settings=settings,
            type_aliases=type_aliases,
            environment=environment,
            mappers=tuple(mappers),
        )

    # Document structure

    def _read_sections(self) -> Dict[str, ET.Element]:
        self._activity("reading the configuration document")
        try:
            root = ET.fromstring(self.source.read())
        except ET.ParseError as e:
            raise ConfigParseError(f"Malformed configuration document: {e}") from e

        if root.tag != "configuration":
            raise ConfigParseError(f"Root element must be <configuration>, found <{root.tag}>")

        sections: Dict[str, ET.Element] = {}
        for child in root:
            if child.tag not in self.SECTIONS:
                raise ConfigParseError(f"Unknown configuration element <{child.tag}>")
            if child.tag in sections:
                raise ConfigParseError(f"Duplicate configuration element <{child.tag}>")
            sections[child.tag] = child
        return sections

    def _children(self, node: ET.Element, tag: str) -> Iterator[ET.Element]:
        for child in node:
            if child.tag != tag:
                raise ConfigParseError(f"Unexpected element <{child.tag}> in <{node.tag}>")
            yield child

    def _value(self, node: ET.Element, attribute: str, required: bool = True) -> Optional[str]:
        """Reads an attribute, resolving placeholders and encrypted values."""
        raw = node.get(attribute)
        if raw is None:
            if required:
                raise ConfigParseError(f"<{node.tag}> requires a '{attribute}' attribute")
            return None

        value = resolve_placeholders(raw, self._variables)
        if is_encrypted(value):
            value = self._get_encrypter().decrypt_value(value)
        return value

    # Sections

    def _parse_properties(self, node: Optional[ET.Element]) -> PropertiesDict:
        variables: PropertiesDict = {}
        if node is not None:
            # Body values may only reference the caller's overrides
            self._variables = self.overrides
            for child in self._children(node, "property"):
                variables[self._value(child, "name")] = self._value(child, "value")

            resource = node.get("resource")
            if resource and node.get("url"):
                raise ConfigParseError(
                    "The properties element cannot specify both a url and a resource "
                    "based property file reference. Please specify one or the other."
                )
            if node.get("url"):
                raise ConfigParseError("url based properties are not supported, use resource")
            if resource:
                path = self.base_path / resolve_placeholders(resource, self.overrides)
                ErrorContext.instance().object(str(path))
                variables.update(load_properties(path))

        variables.update(self.overrides)
        return variables

    def _parse_settings(self, node: Optional[ET.Element]) -> Settings:
        values: Dict[str, str] = {}
        if node is not None:
            for child in self._children(node, "setting"):
                name = self._value(child, "name")
                if name not in _SETTING_NAMES:
                    raise ConfigParseError(
                        f"The setting {name} is not known. "
                        f"Make sure you spelled it correctly (case sensitive)."
                    )
                values[name] = self._value(child, "value")

        try:
            return Settings.model_validate(values)
        except ValidationError as e:
            raise ConfigParseError(f"Invalid settings: {e}") from e

    def _parse_type_aliases(self, node: Optional[ET.Element]) -> Dict[str, Any]:
        aliases: Dict[str, Any] = {}
        if node is None:
            return aliases

        for child in self._children(node, "typeAlias"):
            type_name = self._value(child, "type")
            module_name, _, attribute = type_name.rpartition(".")
            alias = self._value(child, "alias", required=False) or attribute
            ErrorContext.instance().object(f"type alias '{alias}'")
            if not module_name:
                raise ConfigParseError(f"Type '{type_name}' must be a dotted import path")
            try:
                target = getattr(importlib.import_module(module_name), attribute)
            except (ImportError, AttributeError) as e:
                raise ConfigParseError(f"Error resolving type alias '{alias}'. Cause: {e}") from e
            aliases[alias.lower()] = target
        return aliases

    def _parse_environments(self, node: Optional[ET.Element]) -> Optional[Environment]:
        requested = self.environment
        if node is None:
            if requested is not None:
                raise ConfigParseError(
                    f"Environment '{requested}' requested but the configuration defines no environments"
                )
            return None

        if requested is None:
            requested = self._value(node, "default", required=False)
            if not requested:
                raise ConfigParseError("No environment specified and <environments> has no default")

        selected = None
        seen = set()
        for child in self._children(node, "environment"):
            environment_id = self._value(child, "id")
            if environment_id in seen:
                raise ConfigParseError(f"Duplicate environment '{environment_id}'")
            seen.add(environment_id)
            if environment_id == requested:
                selected = child

        if selected is None:
            raise ConfigParseError(f"Environment '{requested}' is not defined")

        ErrorContext.instance().object(f"environment '{requested}'")
        environment = self._build_environment(requested, selected)
        logger.debug(f"Environment '{requested}' selected from {self.resource}")
        return environment

    def _build_environment(self, environment_id: str, node: ET.Element) -> Environment:
        elements: Dict[str, ET.Element] = {}
        for child in node:
            if child.tag not in ("transactionManager", "dataSource"):
                raise ConfigParseError(f"Unexpected element <{child.tag}> in <environment>")
            if child.tag in elements:
                raise ConfigParseError(f"Duplicate element <{child.tag}> in <environment>")
            elements[child.tag] = child

        transaction_manager = elements.get("transactionManager")
        if transaction_manager is None:
            raise ConfigParseError("Environment declaration requires a <transactionManager>")
        data_source = elements.get("dataSource")
        if data_source is None:
            raise ConfigParseError("Environment declaration requires a <dataSource>")

        properties: PropertiesDict = {}
        for child in self._children(data_source, "property"):
            properties[self._value(child, "name")] = self._value(child, "value")

        url = properties.pop("url", None)
        if not url:
            raise ConfigParseError(f"<dataSource> of environment '{environment_id}' requires a 'url' property")

        pool_timeout = None
        time_to_wait = properties.pop("poolTimeToWait", None)
        if time_to_wait is not None:
            try:
                pool_timeout = float(time_to_wait) / 1000
            except ValueError as e:
                raise ConfigParseError(f"Invalid poolTimeToWait value: {time_to_wait!r}") from e

        try:
            return Environment(
                id=environment_id,
                transaction_manager=self._value(transaction_manager, "type").upper(),
                data_source=DataSource(
                    type=self._value(data_source, "type").upper(),
                    url=url,
                    username=properties.pop("username", None),
                    password=properties.pop("password", None),
                    pool_size=properties.pop("poolMaximumActiveConnections", None),
                    pool_timeout=pool_timeout,
                    properties=properties,
                ),
            )
        except ValidationError as e:
            raise ConfigParseError(f"Invalid environment '{environment_id}': {e}") from e

    def _parse_mappers(self, node: Optional[ET.Element]) -> List[str]:
        mappers: List[str] = []
        if node is None:
            return mappers

        for child in self._children(node, "mapper"):
            references = [
                value for value in (
                    self._value(child, attribute, required=False)
                    for attribute in ("resource", "url", "class")
                )
                if value is not None
            ]
            if len(references) != 1:
                raise ConfigParseError(
                    "A mapper element may only specify a url, resource or class, but not more than one."
                )
            mappers.append(references[0])
        return mappers

    # Helpers

    def _check_overrides(self) -> None:
        for key, value in self.overrides.items():
            if not isinstance(key, str) or not isinstance(value, str):
                raise ConfigParseError(
                    f"Property overrides must map strings to strings, got {key!r}: {value!r}"
                )

    def _get_encrypter(self) -> ConfigEncrypter:
        if self._encrypter is None:
            self._encrypter = ConfigEncrypter()
        return self._encrypter

    def _activity(self, activity: str) -> None:
        ErrorContext.instance().activity(activity).object(None)

    @staticmethod
    def _source_directory(source: Any) -> Path:
        name = getattr(source, "name", None)
        if isinstance(name, str) and name and not name.startswith("<"):
            return Path(name).resolve().parent
        return Path.cwd()
