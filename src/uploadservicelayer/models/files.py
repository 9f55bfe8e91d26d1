#  Copyright 2026 Canonical Ltd.  This software is licensed under the
#  GNU Affero General Public License version 3 (see the file LICENSE).

from pydantic import BaseModel, Field, model_validator

DEFAULT_MIME_TYPE = "application/octet-stream"


class FileUpload(BaseModel):
    """A file received from a client, ready to be stored."""

    filename: str = Field(min_length=1, max_length=255)
    mime_type: str = Field(default=DEFAULT_MIME_TYPE, max_length=100)
    size: int = Field(ge=0)
    content: bytes

    @model_validator(mode="after")
    def check_size(self) -> "FileUpload":
        if self.size != len(self.content):
            raise ValueError(
                f"size {self.size} does not match the content length {len(self.content)}"
            )
        return self
