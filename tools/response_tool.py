"""Turns detect-intent response segments into Telegram Bot API messages.

Custom payload layouts follow the Bot API parameter names, e.g.
``{"photo": "<url>", "caption": "..."}`` for sendPhoto,
``{"voice": "<url>"}`` for sendVoice and
``{"text": "...", "reply_markup": {...}}`` for sendMessage with buttons.
"""

import json
import logging
from enum import Enum
from typing import Any, Dict, Hashable, Iterable, List, Mapping

from google.protobuf import json_format
from google.protobuf.message import Message
from pydantic import ValidationError

from app.schemas.messages import (
    OutboundMessage,
    PayloadSegment,
    PhotoMessage,
    TextMessage,
    TextSegment,
    VoiceMessage,
)

logger = logging.getLogger("response_tool")


class PayloadDecodeError(ValueError):
    """A custom payload could not be turned into a Telegram message."""


class UnrecognizedPayloadError(PayloadDecodeError):
    pass


# Checked in declaration order; the first key present decides the kind.
class PayloadKind(Enum):
    PHOTO = "photo"
    VOICE = "voice"
    TEXT = "text"


_MESSAGE_TYPES = {
    PayloadKind.PHOTO: PhotoMessage,
    PayloadKind.VOICE: VoiceMessage,
    PayloadKind.TEXT: TextMessage,
}


def _restore_ints(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, dict):
        return {key: _restore_ints(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_restore_ints(item) for item in value]
    return value


def decode_payload(payload: Any) -> Dict[str, Any]:
    if isinstance(payload, Message):
        # Struct stores every number as a double.
        decoded = _restore_ints(json_format.MessageToDict(payload))
    elif isinstance(payload, Mapping):
        decoded = dict(payload)
    elif isinstance(payload, (str, bytes, bytearray)):
        try:
            decoded = json.loads(payload)
        except ValueError as e:
            raise PayloadDecodeError(f"Payload is not valid JSON: {e}") from e
    else:
        raise PayloadDecodeError(f"Unsupported payload type: {type(payload).__name__}")

    if not isinstance(decoded, dict):
        raise PayloadDecodeError(f"Payload must decode to an object, got {type(decoded).__name__}")
    return decoded


def payload_kind(decoded: Mapping[str, Any]) -> PayloadKind:
    for kind in PayloadKind:
        if kind.value in decoded:
            return kind
    raise UnrecognizedPayloadError(f"No recognized key in payload (keys: {sorted(decoded)})")


def payload_to_message(payload: Any, conversation_id: Hashable) -> OutboundMessage:
    decoded = decode_payload(payload)
    kind = payload_kind(decoded)
    decoded.pop("chat_id", None)
    content = decoded.pop(kind.value)
    try:
        return _MESSAGE_TYPES[kind](chat_id=conversation_id, extra=decoded, **{kind.value: content})
    except ValidationError as e:
        raise PayloadDecodeError(f"Invalid {kind.value} payload: {e}") from e


def to_outbound_messages(segments: Iterable[Any], conversation_id: Hashable) -> List[OutboundMessage]:
    replies: List[OutboundMessage] = []

    for segment in segments:
        if isinstance(segment, TextSegment):
            replies.append(TextMessage(chat_id=conversation_id, text="".join(segment.lines)))
        elif isinstance(segment, PayloadSegment):
            try:
                replies.append(payload_to_message(segment.payload, conversation_id))
            except PayloadDecodeError as e:
                logger.error(f"Skipping payload for chat ID {conversation_id}: {e}")

    return replies
