"""
Default values for the CLI
"""

LOG_LEVEL_ENV = "SQLSESSION_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"
