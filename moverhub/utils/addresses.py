"""Best-effort parsing of free-text US addresses"""

import re
from typing import Optional, TypedDict

STATE_ZIP = re.compile(r"\b([A-Za-z]{2})\s+(\d{5}(?:-\d{4})?)\s*$")


class ParsedAddress(TypedDict):
    street: str
    city: str
    state: str
    postal_code: str


def parse_address(address: Optional[str]) -> ParsedAddress:
    """
    Split "123 Main St, Austin, TX 78701[, USA]" into parts.

    Never raises: anything that cannot be recognised is left as an empty string.
    """
    result: ParsedAddress = {"street": "", "city": "", "state": "", "postal_code": ""}
    if not address or not isinstance(address, str):
        return result

    parts = [p.strip() for p in address.split(",") if p.strip()]
    if not parts:
        return result
    if len(parts) > 1 and parts[-1].upper() in ("USA", "US", "UNITED STATES"):
        parts = parts[:-1]

    result["street"] = parts[0]
    if len(parts) == 1:
        return result

    match = STATE_ZIP.search(parts[-1])
    if match:
        result["state"] = match.group(1).upper()
        result["postal_code"] = match.group(2)
        # "Austin TX 78701" without a comma before the state
        leftover = parts[-1][: match.start()].strip()
        if leftover:
            result["city"] = leftover
        elif len(parts) >= 3:
            result["city"] = parts[-2]
    elif len(parts) >= 2:
        result["city"] = parts[1]

    return result
