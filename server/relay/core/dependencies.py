from fastapi import Request

from relay.services.upstream import ChatRelay


def get_chat_relay(request: Request) -> ChatRelay:
    relay = getattr(request.app.state, "relay", None)
    if not relay:
        raise RuntimeError("Chat relay not initialized")
    return relay
