from typing import Optional
from fastapi import Header

from pravis.core import services


def get_assistant_service():
    return services.assistant_service


def get_llm():
    return services.llm


async def get_access_token(authorization: Optional[str] = Header(default=None)) -> Optional[str]:
    """
    Bearer token forwarded by the browser. It is carried into the session
    context as-is; verifying it is the identity provider's job.
    """
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()
