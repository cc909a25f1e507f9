"""Message shapes passed between the Telegram side and the intent-detection agent."""

from typing import Any, ClassVar, Dict, List, Union

from pydantic import BaseModel, Field

ChatId = Union[int, str]


class IntentRequest(BaseModel):
    session: str
    text: str
    language_code: str


class TextSegment(BaseModel):
    lines: List[str] = Field(default_factory=list)


class PayloadSegment(BaseModel):
    # Undecoded custom payload: a protobuf Struct, a mapping or JSON text.
    payload: Any = None


ResponseSegment = Union[TextSegment, PayloadSegment]


class OutboundMessage(BaseModel):
    """One Bot API call's worth of content for a single chat.

    ``extra`` holds whatever additional Bot API fields came with the
    payload (``caption``, ``reply_markup``, ``parse_mode`` ...) and is
    sent through untouched.
    """

    method: ClassVar[str] = "sendMessage"
    content_field: ClassVar[str] = "text"

    chat_id: ChatId
    extra: Dict[str, Any] = Field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        payload = dict(self.extra)
        payload[self.content_field] = getattr(self, self.content_field)
        payload["chat_id"] = self.chat_id
        return payload


class TextMessage(OutboundMessage):
    method: ClassVar[str] = "sendMessage"
    content_field: ClassVar[str] = "text"

    text: str


class PhotoMessage(OutboundMessage):
    method: ClassVar[str] = "sendPhoto"
    content_field: ClassVar[str] = "photo"

    photo: str


class VoiceMessage(OutboundMessage):
    method: ClassVar[str] = "sendVoice"
    content_field: ClassVar[str] = "voice"

    voice: str
