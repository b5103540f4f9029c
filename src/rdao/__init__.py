"""
RDAO - relational data access object for SQL Server.

- rdao.core: executors, result shapes, templating, errors
"""

__version__ = "0.1.0"

from rdao.core import *  # noqa
