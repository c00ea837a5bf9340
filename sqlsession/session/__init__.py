"""
Session factories produced by the builder.
"""
from sqlsession.session.factory import SessionFactory

# Explicit export of public components
__all__ = ['SessionFactory']
