"""
Line-oriented scanners for smartctl text output.

The temperature rule reads `smartctl -A` attribute tables, the health rule
reads `smartctl -H` output. The two rules are independent: a parse failure in
one never affects the other.
"""

import re
from typing import Optional

from ...models import SmartRecord, SmartStatus

TEMPERATURE_ATTRIBUTE_ID = "194"
TEMPERATURE_ATTRIBUTE_NAMES = ("Temperature_Celsius", "Temperature_Internal")
# ID# ATTRIBUTE_NAME FLAG VALUE WORST THRESH TYPE UPDATED WHEN_FAILED RAW_VALUE
RAW_VALUE_COLUMN = 9

_HEALTH_PATTERN = re.compile(
    r"SMART overall-health self-assessment test result:\s*([A-Z_]+)",
    re.IGNORECASE,
)


def parse_temperature(stdout: str) -> Optional[int]:
    """Return the raw value of attribute 194 or None if no row can be read."""
    for line in stdout.splitlines():
        cols = line.split()
        if not cols or cols[0] != TEMPERATURE_ATTRIBUTE_ID:
            continue
        if not any(name in line for name in TEMPERATURE_ATTRIBUTE_NAMES):
            continue
        if len(cols) <= RAW_VALUE_COLUMN:
            continue
        # Raw value may carry a suffix like "35 (Min/Max 18/45)"; only the leading integer counts
        match = re.match(r"-?\d+", cols[RAW_VALUE_COLUMN])
        if match:
            return int(match.group(0))

    return None


def parse_health(stdout: str) -> SmartRecord:
    """
    Map the self-assessment verdict to status and health.

    Any token other than PASSED is unhealthy, including transitional ones.
    """
    match = _HEALTH_PATTERN.search(stdout)
    if not match:
        return SmartRecord()

    status = match.group(1).upper()
    if status == SmartStatus.PASSED.value:
        return SmartRecord(overall_status=SmartStatus.PASSED.value, healthy=True)
    if status == SmartStatus.FAILED.value:
        return SmartRecord(overall_status=SmartStatus.FAILED.value, healthy=False)

    return SmartRecord(overall_status=status, healthy=False)
