import json


async def collect_events(stream):
    """Drain a CompletionStream into a list."""
    return [event async for event in stream]


def parse_sse_data(body):
    """
    Split an SSE body into its `data:` payloads.
    JSON payloads are decoded; the `[DONE]` sentinel is returned as-is.
    """
    payloads = []
    for block in body.split("\n\n"):
        block = block.strip()
        if not block.startswith("data:"):
            continue
        data = block[len("data:"):].strip()
        payloads.append(data if data == "[DONE]" else json.loads(data))
    return payloads


def assert_single_trailing_finish(events):
    """Assert the event list ends with exactly one FinishEvent and has no other."""
    from models.chat_models import FinishEvent

    finishes = [e for e in events if isinstance(e, FinishEvent)]
    assert len(finishes) == 1, f"Expected exactly one FinishEvent, got {len(finishes)}: {events}"
    assert isinstance(events[-1], FinishEvent), f"FinishEvent is not last: {events}"


def delta_text(chunks, field):
    """Concatenate one delta field across chat.completion.chunk payloads."""
    return "".join(
        chunk["choices"][0]["delta"].get(field) or ""
        for chunk in chunks
        if isinstance(chunk, dict)
    )
