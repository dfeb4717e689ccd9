from app.llm.client_base import BaseChatClient
from app.llm.factory import ChatClientFactory
from app.llm.models import ChatCompletion, ChatStream, StreamChunk

__all__ = [
    "BaseChatClient",
    "ChatClientFactory",
    "ChatCompletion",
    "ChatStream",
    "StreamChunk",
]
