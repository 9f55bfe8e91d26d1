# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).


class BaseException(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestException(BaseException):
    def __init__(self, message: str = "Invalid request."):
        super().__init__(message)


class StorageException(BaseException):
    def __init__(self, message: str = "The storage backend failed."):
        super().__init__(message)


class ConfigurationException(BaseException):
    def __init__(self, message: str = "Invalid configuration."):
        super().__init__(message)


class ClientDisconnectedException(BaseException):
    def __init__(self):
        super().__init__(
            "The client disconnected before the request was completed."
        )
