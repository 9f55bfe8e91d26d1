#  Copyright 2026 Canonical Ltd.  This software is licensed under the
#  GNU Affero General Public License version 3 (see the file LICENSE).

import time
from uuid import uuid4


class Context:
    def __init__(self, context_id: str | None = None):
        self.context_id = context_id or self._generate_context_id()
        self._start_timestamp = time.perf_counter()

    def get_elapsed_time_seconds(self) -> float:
        return time.perf_counter() - self._start_timestamp

    def _generate_context_id(self) -> str:
        return str(uuid4())
