"""Server-Sent Events framing."""

import json
from dataclasses import dataclass, field
from typing import Any

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@dataclass
class SSEEvent:
    """One named event of the outbound stream."""
    event: str
    data: dict[str, Any] = field(default_factory=dict)

    def encode(self) -> str:
        payload = json.dumps(self.data, ensure_ascii=False, default=str)
        return f"event: {self.event}\ndata: {payload}\n\n"


def parse_stream(text: str) -> list[SSEEvent]:
    """Split an encoded stream back into events (used by the CLI and tests)."""
    events = []
    for block in text.split("\n\n"):
        name, data = "message", ""
        for line in block.splitlines():
            if line.startswith("event:"):
                name = line[len("event:"):].strip()
            elif line.startswith("data:"):
                data += line[len("data:"):].strip()
        if data:
            events.append(SSEEvent(name, json.loads(data)))
    return events
