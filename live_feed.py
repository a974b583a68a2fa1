"""Live feed: stream intel reports to /ws/intel and print each acknowledgement.

Usage:
    python live_feed.py [host:port]

Sends a short scripted sequence for one zone (verification, conflicting
quiet/crowd reports, then two hazard reports) so the state transitions
can be watched end to end against a running server.
"""

import asyncio
import json
import sys
import uuid
from datetime import datetime, timezone

import websockets

HOST = sys.argv[1] if len(sys.argv) > 1 else "127.0.0.1:8000"
INTEL_URI = f"ws://{HOST}/ws/intel"
ZONE_ID = "demo-zone"

SCRIPT = [
    ("VERIFICATION", "scout-1", {}),
    ("QUIET_CONFIRMED", "scout-2", {}),
    ("CROWD_SURGE", "scout-3", {}),
    ("PRICE_SUBMISSION", "scout-4", {"price": 40}),
    ("HAZARD_REPORT", "scout-5", {"detail": "flooding"}),
    ("HAZARD_REPORT", "scout-6", {"detail": "flooding"}),
]


def _report(intel_type: str, contributor: str, payload: dict) -> dict:
    return {
        "id": str(uuid.uuid4()),
        "zone_id": ZONE_ID,
        "contributor_id": contributor,
        "type": intel_type,
        "payload": payload,
        "trust_weight": 1.0,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }


async def main():
    async with websockets.connect(INTEL_URI) as ws:
        print(f"[FEED] Connected to {INTEL_URI}\n")
        for intel_type, contributor, payload in SCRIPT:
            await ws.send(json.dumps(_report(intel_type, contributor, payload)))
            ack = json.loads(await ws.recv())
            if ack.get("status") != "accepted":
                print(f"  {intel_type:<18} REJECTED: {ack.get('detail')}")
                continue
            print(
                f"  {intel_type:<18} score={ack['score']:>5}  level={ack['level']:<8} "
                f"state={ack['state']:<8} hazard={ack['hazard_active']}"
            )
            await asyncio.sleep(0.5)
        print("\n[FEED] Done")


if __name__ == "__main__":
    asyncio.run(main())
