"""Message archive endpoints."""

from __future__ import annotations

from flask import Blueprint, Response, request

from message_archive.api.deps import empty_response, json_response, service_context, timing
from message_archive.core.errors import APIError
from message_archive.schemas import MessageCreateSchema, MessageSchema, MessageSearchQuerySchema
from message_archive.services._shared.errors import ConflictError
from message_archive.services.messages import MessageService, render_markdown

bp = Blueprint("messages", __name__)

message_schema = MessageSchema()
message_list_schema = MessageSchema(many=True)
message_create_schema = MessageCreateSchema()
message_search_schema = MessageSearchQuerySchema()

MARKDOWN_MIMETYPE = "text/markdown"


@bp.post("")
@timing
def create_message():
    """Archive a message; a live duplicate ``uid`` is a 400."""

    dto = message_create_schema.load(request.get_json(silent=True) or {})
    service = MessageService(ctx=service_context())
    try:
        message = service.create(dto)
    except ConflictError as exc:
        raise APIError(str(exc), status_code=400, code="duplicate_uid") from exc
    return json_response(message_schema.dump(message), status=201)


@bp.get("/search")
@timing
def search_messages():
    """Search live messages, newest first, as JSON or a markdown transcript."""

    dto, fmt = message_search_schema.load(request.args)
    messages = MessageService(ctx=service_context()).search(dto)
    if fmt == "markdown":
        return Response(render_markdown(messages), mimetype=MARKDOWN_MIMETYPE)
    return json_response(message_list_schema.dump(messages))


@bp.delete("/<string:uid>")
@timing
def delete_message(uid: str):
    """Logically delete a message by uid."""

    MessageService(ctx=service_context()).delete(uid)
    return empty_response()
