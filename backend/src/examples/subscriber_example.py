import asyncio

from client import subscribe_to_timer


def on_tick(err, timestamp):
    if err is not None:
        print("Error:", err)
        return
    print("This is the timer value:", timestamp)


async def main():
    print("Awaiting ticks... (press Ctrl+C to exit)")
    await subscribe_to_timer(1000, on_tick, uri="ws://localhost:8000/ws")

if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("Disconnected.")
