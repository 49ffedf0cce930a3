"""Live replay: stream synthetic device readings to /ws/sensor and watch /ws/dashboard.

Plays a calm phase, then a loud/shaky phase that should push the risk
level to HIGH and arm an automatic countdown.
"""

import argparse
import asyncio
import json
import math
import random

import websockets


async def dashboard_listener(uri: str, ready_event: asyncio.Event):
    """Connect to /ws/dashboard and print every live-feed frame."""
    async with websockets.connect(uri) as ws:
        print("[DASHBOARD] Connected, waiting for live feed...\n")
        ready_event.set()

        while True:
            data = json.loads(await ws.recv())
            if data.get("type") != "live_feed":
                print(f"[DASHBOARD] {data}")
                continue

            esc = data.get("escalation", {})
            state = esc.get("state", {})
            countdown = esc.get("countdown")
            print(
                f"  total={data['total']:6.2f}  level={data['level']:<6}  "
                f"rms={data['audio']['rms']:.2f}  acc={data['motion']['acceleration']:5.1f}  "
                f"phase={state.get('phase')}"
                + (f"  countdown={countdown}" if countdown is not None else "")
            )


def _spectrum(loud: bool) -> dict:
    level = 220 if loud else 30
    bins = [max(0, min(255, int(random.gauss(level, 25)))) for _ in range(1024)]
    return {"type": "spectrum", "bins": bins, "sample_rate": 48000}


def _motion(shaky: bool, t: float) -> dict:
    amp = 18.0 if shaky else 0.3
    return {
        "type": "motion",
        "acceleration": {
            "x": amp * math.sin(t * 7) + random.uniform(-amp, amp),
            "y": amp * math.cos(t * 5),
            "z": random.uniform(-amp, amp),
        },
    }


async def stream_device(uri: str, lat: float, lng: float):
    """Calm for 5 s, then agitated for 20 s."""
    async with websockets.connect(uri) as ws:
        await ws.send(json.dumps({"type": "location", "lat": lat, "lng": lng}))
        print(f"[SENSOR] location ack: {json.loads(await ws.recv())}")

        t = 0.0
        while t < 25.0:
            agitated = t >= 5.0
            await ws.send(json.dumps(_spectrum(agitated)))
            await ws.send(json.dumps(_motion(agitated, t)))
            await ws.recv()  # motion ack
            await asyncio.sleep(0.1)
            t += 0.1


async def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--host", default="localhost:8000")
    parser.add_argument("--lat", type=float, default=40.7291)
    parser.add_argument("--lng", type=float, default=-73.9965)
    args = parser.parse_args()

    ready = asyncio.Event()
    listener_task = asyncio.create_task(
        dashboard_listener(f"ws://{args.host}/ws/dashboard", ready)
    )
    await ready.wait()

    print("\nStreaming device readings...\n")
    await stream_device(f"ws://{args.host}/ws/sensor", args.lat, args.lng)

    # Let the countdown run out
    await asyncio.sleep(12)

    listener_task.cancel()
    print("\nDone!")


if __name__ == "__main__":
    asyncio.run(main())
