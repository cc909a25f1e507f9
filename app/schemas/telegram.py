from pydantic import BaseModel, ConfigDict
from typing import Optional


class TelegramChat(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int
    type: Optional[str] = None


class TelegramMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    message_id: Optional[int] = None
    chat: TelegramChat
    date: Optional[int] = None
    text: Optional[str] = None


class TelegramUpdate(BaseModel):
    model_config = ConfigDict(extra="allow")

    update_id: int
    message: Optional[TelegramMessage] = None

    @property
    def chat_text(self) -> Optional[tuple]:
        """(chat_id, text) for plain text messages, None for everything else."""
        if self.message is None or not self.message.text:
            return None
        return self.message.chat.id, self.message.text
