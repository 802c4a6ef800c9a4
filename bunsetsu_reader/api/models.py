"""Response schema and parsing for the remote segmentation service.

WHY: The precise segmenter is an external process; anything it sends
back must be checked before it reaches the reader. A bad response has to
surface as a segmentation failure (so the fallback takes over), not as
an IndexError three layers further down.

HOW: A JSON Schema describes the two accepted response shapes — a bare
array of phrase strings, or an object with a "phrases" array and
optional degradation fields. jsonschema validates the shape; the
reconstruction check is done by hand since JSON Schema cannot express it.

RULES:
- Phrase strings must be non-empty
- Joined phrases must equal the request text exactly
- An upstream that reports degraded=true is not a precise result
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional

import jsonschema

_PHRASE_LIST_SCHEMA = {
    "type": "array",
    "items": {"type": "string", "minLength": 1},
}

SPLIT_RESPONSE_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "split_bunsetsu response",
    "oneOf": [
        _PHRASE_LIST_SCHEMA,
        {
            "type": "object",
            "required": ["phrases"],
            "properties": {
                "phrases": _PHRASE_LIST_SCHEMA,
                "degraded": {"type": "boolean"},
                "reason": {"type": ["string", "null"]},
            },
        },
    ],
}


@dataclass
class SplitResponse:
    """Parsed body of a POST /split_bunsetsu response.

    RULES:
    - phrases: ordered phrase strings
    - degraded: True when the upstream itself fell back to a heuristic
    - reason: the upstream's degradation reason, if any
    """

    phrases: List[str]
    degraded: bool = False
    reason: Optional[str] = None

    @classmethod
    def from_json(cls, data: Any) -> SplitResponse:
        """Validate and parse a decoded JSON body.

        Raises:
            jsonschema.ValidationError: If the body matches neither shape.
        """
        jsonschema.validate(instance=data, schema=SPLIT_RESPONSE_SCHEMA)
        if isinstance(data, list):
            return cls(phrases=list(data))
        return cls(
            phrases=list(data["phrases"]),
            degraded=data.get("degraded", False),
            reason=data.get("reason"),
        )

    def reconstructs(self, text: str) -> bool:
        return "".join(self.phrases) == text
