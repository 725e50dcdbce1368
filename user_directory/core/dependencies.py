"""
FastAPI dependencies - injection of the directory service.
The service is built once in the app lifespan and kept on ``app.state``.
"""

from typing import Annotated

from fastapi import Depends, Request

from user_directory.services.directory_service import DirectoryService


def get_directory_service(request: Request) -> DirectoryService:
    """Return the process-wide service. Tests override this dependency."""
    return request.app.state.directory


Directory = Annotated[DirectoryService, Depends(get_directory_service)]
