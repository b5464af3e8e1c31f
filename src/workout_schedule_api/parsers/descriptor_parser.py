"""
Descriptor Parser

Parses the raw string stored in a plan's schedule slot into a schedule item.

Slot values come in three shapes:
- Rest day: "Rest Session", "rest", "Rest day" (any casing)
- Activity: "activityType: running; distance: 5.0; runType: outdoor_run; duration: 1800"
- Session id: "sess_abc123"

The grammar is permissive: malformed input degrades to ``Unresolved``.
"""

import logging
import re
from typing import Dict, Optional

from ..models import ActivityItem, ParsedDescriptor, RestDay, SessionRef, Unresolved
from ..utils import to_float

logger = logging.getLogger(__name__)


class DescriptorParser:
    """Parser for schedule slot descriptors"""

    REST_PATTERN = re.compile(r'rest', re.IGNORECASE)  # "Rest Session", "rest day"
    ACTIVITY_PATTERN = re.compile(r'activitytype', re.IGNORECASE)  # "activityType:running;..."

    PAIR_SEPARATOR = ";"
    KEY_VALUE_SEPARATOR = ":"

    def parse(self, raw: Optional[str]) -> ParsedDescriptor:
        """
        Parse a slot descriptor.

        Rest detection strictly precedes activity detection, which strictly
        precedes the session-id fallback. A session whose name contains
        "rest" is therefore read as a rest day.

        Args:
            raw: Descriptor string from the plan's schedule map

        Returns:
            RestDay, ActivityItem, SessionRef or Unresolved
        """
        if raw is None or not isinstance(raw, str) or not raw.strip():
            return Unresolved(reason="empty descriptor")

        if self.REST_PATTERN.search(raw):
            return RestDay()

        if self.ACTIVITY_PATTERN.search(raw):
            return self.parse_activity(raw)

        return SessionRef(session_id=raw.strip())

    def parse_activity(self, raw: str) -> ActivityItem | Unresolved:
        """Parse a ';'-separated list of key:value pairs into an ActivityItem."""
        fields = self.split_pairs(raw)

        activity_type = fields.get("activitytype")
        if not activity_type:
            logger.debug(f"Activity descriptor without activityType: {raw!r}")
            return Unresolved(reason="activity descriptor missing activityType")

        duration = to_float(fields.get("duration"))

        return ActivityItem(
            activity_type=activity_type.lower(),
            distance=to_float(fields.get("distance")),
            duration_seconds=int(duration) if duration is not None else None,
            run_type=fields.get("runtype") or None,
            sport_type=fields.get("sporttype") or None,
        )

    def split_pairs(self, raw: str) -> Dict[str, str]:
        """
        Split "k1:v1; k2:v2" into a dict keyed by lower-cased key.

        Pairs without exactly one ':' are skipped. Later duplicates win.
        """
        fields: Dict[str, str] = {}
        for pair in raw.split(self.PAIR_SEPARATOR):
            parts = pair.split(self.KEY_VALUE_SEPARATOR)
            if len(parts) != 2:
                continue
            key = parts[0].strip().lower()
            value = parts[1].strip()
            if key:
                fields[key] = value
        return fields


_parser = DescriptorParser()


def parse_descriptor(raw: Optional[str]) -> ParsedDescriptor:
    """Parse a schedule slot descriptor. Never raises."""
    return _parser.parse(raw)
