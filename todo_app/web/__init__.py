"""
Web front end's side of the API: token slots, the bearer/refresh auth flow
for outgoing calls, and a typed API client.
"""

from todo_app.web.api_client import TodoApiClient
from todo_app.web.token_handler import JwtTokenAuth
from todo_app.web.token_storage import TokenStorageService

__all__ = ["JwtTokenAuth", "TodoApiClient", "TokenStorageService"]
