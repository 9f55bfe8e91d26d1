# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Timezone-aware datetime for the current time in UTC."""
    return datetime.now(timezone.utc)
