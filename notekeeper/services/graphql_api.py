"""
NoteKeeper Backend — GraphQL Notes Platform Client
====================================================

What:  NotesApi implementation for a hosted GraphQL notes API.
How:   Sends the listNotes query and the createNote / deleteNote mutations
       over an httpx.AsyncClient, authenticating with an `x-api-key` header.
Who:   Built by main.py when NOTES_BACKEND=graphql.

Error translation:
    transport error (DNS, connect, timeout) → RemoteApiError
    HTTP status >= 400                      → RemoteApiError (status in context)
    response with a GraphQL `errors` array  → RemoteApiError (first message)
    malformed `data`                        → RemoteApiError

No retry or backoff: a failed call is reported once.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from notekeeper.exceptions import RemoteApiError
from notekeeper.schemas.note import NoteRecord
from notekeeper.services.notes_api import CreateNoteInput, NotesApi

logger = logging.getLogger(__name__)


# ── Operations ────────────────────────────────────────────────────────────

LIST_NOTES = """
query ListNotes {
  listNotes {
    items {
      id
      name
      description
      image
    }
  }
}
"""

CREATE_NOTE = """
mutation CreateNote($input: CreateNoteInput!) {
  createNote(input: $input) {
    id
    name
    description
    image
  }
}
"""

DELETE_NOTE = """
mutation DeleteNote($input: DeleteNoteInput!) {
  deleteNote(input: $input) {
    id
  }
}
"""


class GraphQLNotesApi(NotesApi):
    """
    GraphQL platform client.

    The httpx client may be injected (tests pass one built on
    httpx.MockTransport); otherwise one is created and owned by this object
    and closed by close().
    """

    def __init__(
        self,
        endpoint: str,
        api_key: str = "",
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.endpoint = endpoint
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["x-api-key"] = api_key
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._headers = headers
        logger.info("GraphQLNotesApi initialized with endpoint=%s", endpoint)

    async def _execute(
        self,
        operation: str,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        POST one GraphQL operation and return its `data` object.

        Raises:
            RemoteApiError on transport, HTTP or GraphQL errors.
        """
        payload: Dict[str, Any] = {"query": query}
        if variables is not None:
            payload["variables"] = variables

        try:
            response = await self._client.post(
                self.endpoint, json=payload, headers=self._headers
            )
        except httpx.HTTPError as e:
            logger.error("%s: transport error talking to %s: %s", operation, self.endpoint, e)
            raise RemoteApiError(
                message="The notes platform is unreachable. Please try again.",
                operation=operation,
                context={"error_type": type(e).__name__},
            ) from e

        if response.status_code >= 400:
            logger.error("%s: platform returned HTTP %d", operation, response.status_code)
            raise RemoteApiError(
                message=f"The notes platform rejected {operation} (HTTP {response.status_code}).",
                operation=operation,
                context={"status_code": response.status_code},
            )

        try:
            body = response.json()
        except ValueError as e:
            raise RemoteApiError(
                message="The notes platform returned an unreadable response.",
                operation=operation,
            ) from e
        if not isinstance(body, dict):
            raise RemoteApiError(
                message="The notes platform returned an unreadable response.",
                operation=operation,
            )

        errors = body.get("errors")
        if errors:
            first = errors[0].get("message", "unknown error") if isinstance(errors[0], dict) else str(errors[0])
            logger.error("%s: GraphQL errors: %s", operation, errors)
            raise RemoteApiError(
                message=f"The notes platform rejected {operation}: {first}",
                operation=operation,
                context={"error_count": len(errors)},
            )

        data = body.get("data")
        if not isinstance(data, dict) or data.get(operation) is None:
            raise RemoteApiError(
                message=f"The notes platform returned no data for {operation}.",
                operation=operation,
            )
        return data

    def _parse_record(self, operation: str, raw: Any) -> NoteRecord:
        try:
            return NoteRecord.model_validate(raw)
        except PydanticValidationError as e:
            raise RemoteApiError(
                message=f"The notes platform returned a malformed note in {operation}.",
                operation=operation,
            ) from e

    async def list_notes(self) -> List[NoteRecord]:
        data = await self._execute("listNotes", LIST_NOTES)
        items = data["listNotes"].get("items") or []
        notes = [self._parse_record("listNotes", item) for item in items if item is not None]
        logger.debug("listNotes returned %d notes", len(notes))
        return notes

    async def create_note(self, note_input: CreateNoteInput) -> NoteRecord:
        data = await self._execute(
            "createNote", CREATE_NOTE, {"input": dict(note_input)}
        )
        record = self._parse_record("createNote", data["createNote"])
        logger.info("createNote stored note %s (image=%s)", record.id, record.image)
        return record

    async def delete_note(self, note_id: str) -> None:
        await self._execute("deleteNote", DELETE_NOTE, {"input": {"id": note_id}})
        logger.info("deleteNote removed note %s", note_id)

    async def health_check(self) -> bool:
        """
        Probe the endpoint with the introspection-free `__typename` query.

        Returns False instead of raising: health checks never fail a request.
        """
        try:
            response = await self._client.post(
                self.endpoint,
                json={"query": "query { __typename }"},
                headers=self._headers,
            )
            return response.status_code < 400
        except httpx.HTTPError as e:
            logger.warning("GraphQL health check failed: %s", e)
            return False

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
