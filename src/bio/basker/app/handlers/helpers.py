import logging
from typing import Optional, Type, TypeVar

from aiohttp import web
from pydantic import BaseModel, ValidationError

from bio.basker.app.config import (
    AdminGateAppKey,
    ModerationRegistryAppKey,
    USER_DID_HEADER,
)
from bio.basker.errors import (
    MissingIdentityException,
    NotAuthorizedException,
    ValidationException,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def actor_did(request: web.Request) -> Optional[str]:
    """
    Return the caller's DID from the X-User-DID header, or None.

    The header is taken at face value. Nothing here proves the caller controls
    the DID; any client can claim any identity.
    """
    did: Optional[str] = request.headers.getone(USER_DID_HEADER, None)
    if did is None:
        return None
    did = did.strip()
    return did or None


def require_actor(request: web.Request) -> str:
    did = actor_did(request)
    if did is None:
        raise MissingIdentityException.header_missing()
    return did


def require_admin_permission(request: web.Request, permission: str) -> str:
    """Return the caller's DID if it holds the admin permission."""
    did = require_actor(request)
    if not request.app[AdminGateAppKey].check_permission(did, permission):
        raise NotAuthorizedException.admin_permission(permission)
    return did


def require_moderator(request: web.Request) -> str:
    did = require_actor(request)
    if not request.app[ModerationRegistryAppKey].can_moderate(did):
        raise NotAuthorizedException.moderator_required()
    return did


def require_moderator_permission(request: web.Request, permission: str) -> str:
    """Return the caller's DID if its permission bundle grants the named capability."""
    did = require_actor(request)
    if not request.app[ModerationRegistryAppKey].has_permission(did, permission):
        raise NotAuthorizedException.moderator_permission(permission)
    return did


async def read_model(request: web.Request, model: Type[ModelT]) -> ModelT:
    """
    Parse the JSON request body into a model.

    An empty body parses as an empty object, so missing-field checks in the
    handler produce their specific messages.

    Raises:
        ValidationException: If the body is not JSON or does not fit the model
    """
    try:
        data = await request.read()
        if not data.strip():
            return model.model_validate({})
        return model.model_validate_json(data)
    except ValidationError as e:
        logger.debug("Rejected request body for %s: %s", request.path, e)
        raise ValidationException(_first_error(e)) from None
    except OSError:
        raise ValidationException.invalid_json() from None


def _first_error(e: ValidationError) -> str:
    errors = e.errors()
    if not errors:
        return "Invalid request"
    error = errors[0]
    if error.get("type") == "json_invalid":
        return "Invalid JSON"
    location = ".".join(str(part) for part in error.get("loc", ()))
    if location:
        return f"{location}: {error.get('msg')}"
    return str(error.get("msg"))
