"""
Authenticated principal for a single request.

API Gateway validates the Cognito bearer token before the Lambda function
runs and forwards the token claims in ``requestContext.authorizer.claims``.
The principal built from those claims is passed explicitly to the use cases;
nothing about the caller is kept between invocations.
"""

from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

USERNAME_CLAIM = "cognito:username"
GROUPS_CLAIM = "cognito:groups"


class Principal(BaseModel):
    """The authenticated caller of one request."""

    model_config = ConfigDict(frozen=True)

    username: str = Field(..., min_length=1)
    roles: Tuple[str, ...] = ()

    def has_role(self, role: str) -> bool:
        return role in self.roles


def _parse_groups(groups: Any) -> Tuple[str, ...]:
    if not groups:
        return ()
    if isinstance(groups, str):
        return (groups,)
    return tuple(str(group) for group in groups)


def principal_from_event(event: Dict[str, Any]) -> Optional[Principal]:
    """
    Extract the principal from an API Gateway proxy event.

    Returns None when the request carries no authorizer claims or no
    username claim.
    """
    authorizer = (event.get("requestContext") or {}).get("authorizer") or {}
    claims = authorizer.get("claims") or {}

    username = claims.get(USERNAME_CLAIM) or claims.get("username")
    if not username:
        return None

    return Principal(username=username, roles=_parse_groups(claims.get(GROUPS_CLAIM)))
