# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

import asyncio
from contextlib import suppress

from pydantic import ValidationError
from starlette.datastructures import FormData, UploadFile
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from starlette.requests import ClientDisconnect, Request
from starlette.responses import PlainTextResponse, Response
from starlette.types import Message, Receive
import structlog

from uploadapiserver.api.base import Handler, handler
from uploadservicelayer.db.repositories.files import FilesRepository
from uploadservicelayer.exceptions.catalog import (
    BadRequestException,
    ClientDisconnectedException,
    StorageException,
)
from uploadservicelayer.models.files import DEFAULT_MIME_TYPE, FileUpload

logger = structlog.getLogger(__name__)

FILE_FIELD = "file"

# OPTIONS never gets here: it is answered by the CORS middleware.
ROUTED_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"]

# Non standard, borrowed from nginx: the client closed the connection.
CLIENT_CLOSED_REQUEST = 499


async def read_bounded_body(request: Request, limit: int) -> bytes:
    """Read the whole request body, failing as soon as it exceeds `limit`."""
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > limit:
        raise BadRequestException("Request body too large")

    body = bytearray()
    try:
        async for chunk in request.stream():
            body.extend(chunk)
            if len(body) > limit:
                raise BadRequestException("Request body too large")
    except ClientDisconnect:
        raise ClientDisconnectedException()
    return bytes(body)


def _replay(body: bytes) -> Receive:
    sent = False

    async def receive() -> Message:
        nonlocal sent
        if not sent:
            sent = True
            return {"type": "http.request", "body": body, "more_body": False}
        return {"type": "http.disconnect"}

    return receive


async def parse_form(request: Request, body: bytes) -> FormData:
    """Parse an already read body as form data, allowing a single file."""
    buffered = Request(request.scope, receive=_replay(body))
    try:
        return await buffered.form(max_files=1)
    except MultiPartException as e:
        raise BadRequestException(f"Failed to parse form: {e.message}")
    except HTTPException as e:
        raise BadRequestException(f"Failed to parse form: {e.detail}")


async def read_upload(form: FormData) -> FileUpload:
    """Extract and validate the single file sent in the `file` field.

    Raises BadRequestException when the field is missing or invalid, and
    lets OSError through when the spooled content can't be read.
    """
    upload = form.get(FILE_FIELD)
    if not isinstance(upload, UploadFile):
        raise BadRequestException("Failed to get file")

    content = await upload.read()
    try:
        return FileUpload(
            filename=upload.filename or "",
            mime_type=upload.content_type or DEFAULT_MIME_TYPE,
            size=len(content),
            content=content,
        )
    except ValidationError as e:
        logger.info(
            "invalid upload",
            errors=e.errors(
                include_url=False, include_context=False, include_input=False
            ),
        )
        raise BadRequestException("Invalid file")


async def wait_for_disconnect(request: Request) -> None:
    # The body has been consumed already, so the only message left on the
    # channel is the disconnection.
    while True:
        message = await request.receive()
        if message["type"] == "http.disconnect":
            return


class FilesHandler(Handler):
    """Receives file uploads and stores them."""

    def __init__(self, repository: FilesRepository, max_upload_size: int):
        self.repository = repository
        self.max_upload_size = max_upload_size

    @handler(
        path="/add",
        methods=ROUTED_METHODS,
        status_code=201,
        response_class=PlainTextResponse,
    )
    async def add_file(self, request: Request) -> Response:
        if request.method != "POST":
            return PlainTextResponse("Method not allowed", status_code=405)

        try:
            body = await read_bounded_body(request, self.max_upload_size)
            form = await parse_form(request, body)
        except BadRequestException as e:
            logger.info("rejected upload", reason=e.message)
            return PlainTextResponse("Failed to parse form", status_code=400)
        except ClientDisconnectedException:
            logger.info("client disconnected while sending the body")
            return Response(status_code=CLIENT_CLOSED_REQUEST)

        try:
            file_upload = await read_upload(form)
        except BadRequestException as e:
            logger.info("rejected upload", reason=e.message)
            return PlainTextResponse(e.message, status_code=400)
        except OSError as e:
            logger.error("Failed to read file", error=str(e))
            return PlainTextResponse("Failed to read file", status_code=500)
        finally:
            await form.close()

        try:
            file_id = await self._store(request, file_upload)
        except StorageException as e:
            logger.error(
                "Failed to save file to database",
                upload_filename=file_upload.filename,
                size=file_upload.size,
                error=e.message,
            )
            return PlainTextResponse(
                "Failed to save file to database", status_code=500
            )
        except ClientDisconnectedException:
            logger.info(
                "client disconnected, upload cancelled",
                upload_filename=file_upload.filename,
            )
            return Response(status_code=CLIENT_CLOSED_REQUEST)

        logger.debug(
            "file stored",
            file_id=file_id,
            upload_filename=file_upload.filename,
            size=file_upload.size,
        )
        return PlainTextResponse(
            f"File uploaded successfully with ID: {file_id}",
            status_code=201,
        )

    async def _store(self, request: Request, file_upload: FileUpload) -> int:
        """Run the insert, cancelling it if the client goes away first."""
        insert = asyncio.ensure_future(
            self.repository.insert(
                file_upload.filename,
                file_upload.mime_type,
                file_upload.size,
                file_upload.content,
            )
        )
        disconnect = asyncio.ensure_future(wait_for_disconnect(request))
        try:
            done, _ = await asyncio.wait(
                {insert, disconnect}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            disconnect.cancel()
            if not insert.done():
                insert.cancel()

        if insert in done:
            return insert.result()

        with suppress(asyncio.CancelledError):
            await insert
        # Anything else than a disconnection coming from the channel is a bug.
        disconnect.result()
        raise ClientDisconnectedException()
