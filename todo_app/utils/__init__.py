"""
Common utilities package for the to-do list application.

Logging setup and list pagination. Token and password helpers live in
``todo_app.utils.auth``, which depends on the settings and is therefore not
re-exported here (``todo_app.config`` imports this package).
"""

from todo_app.utils.logger import setup_logger
from todo_app.utils.paging import paginate

__all__ = [
    "setup_logger",
    "paginate",
]
