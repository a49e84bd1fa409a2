"""Bearer token endpoints. Issuance is the only unauthenticated route."""

from __future__ import annotations

from flask import Blueprint, request

from message_archive.api.deps import empty_response, json_response, service_context, timing
from message_archive.schemas import TokenCreateSchema, TokenSchema
from message_archive.services.tokens import TokenService

bp = Blueprint("tokens", __name__)

token_schema = TokenSchema()
token_list_schema = TokenSchema(many=True)
token_create_schema = TokenCreateSchema()


@bp.get("")
@timing
def list_tokens():
    """Return live, unexpired tokens, most recently created first."""

    tokens = TokenService(ctx=service_context()).list()
    return json_response(token_list_schema.dump(tokens))


@bp.post("")
@timing
def issue_token():
    """Issue a new token."""

    dto = token_create_schema.load(request.get_json(silent=True) or {})
    token = TokenService(ctx=service_context()).issue(dto)
    return json_response(token_schema.dump(token), status=201)


@bp.delete("/<string:token_id>")
@timing
def revoke_token(token_id: str):
    """Revoke a token by id."""

    TokenService(ctx=service_context()).revoke(token_id)
    return empty_response()
