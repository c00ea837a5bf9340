"""
Configuration parsing for sqlsession.

This package provides the XML configuration parser and the frozen
configuration model it produces.
"""
from sqlsession.config.model import Configuration, Settings, Environment, DataSource
from sqlsession.config.parser import XMLConfigParser
from sqlsession.config.properties import load_properties, parse_properties, resolve_placeholders

# Explicit export of public components
__all__ = [
    'Configuration',
    'Settings',
    'Environment',
    'DataSource',
    'XMLConfigParser',
    'load_properties',
    'parse_properties',
    'resolve_placeholders',
]
