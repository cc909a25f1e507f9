"""Dialogflow CX detect-intent backend."""

import logging
from typing import List, Optional

from google.api_core import exceptions as google_exceptions
from google.api_core.client_options import ClientOptions
from google.cloud import dialogflowcx_v3

from agents.base_agent import BaseAgent, IntentDetectionError, register_agent
from app.schemas.messages import IntentRequest, PayloadSegment, ResponseSegment, TextSegment

logger = logging.getLogger("dialogflow_agent")


def api_endpoint(location: str) -> Optional[str]:
    """Regional endpoint for a CX location; ``None`` means the global default."""
    if not location or location == "global":
        return None
    return f"{location}-dialogflow.googleapis.com"


def to_segments(response_messages) -> List[ResponseSegment]:
    segments: List[ResponseSegment] = []
    for message in response_messages:
        if "text" in message:
            segments.append(TextSegment(lines=list(message.text.text)))
        elif "payload" in message:
            # Keep the raw Struct; decoding happens when the reply is built.
            segments.append(PayloadSegment(payload=dialogflowcx_v3.ResponseMessage.pb(message).payload))
        else:
            logger.debug(f"Ignoring response message without text or payload: {message}")
    return segments


class DialogflowCXAgent(BaseAgent):
    def __init__(self, project_id: str, location: str, agent_id: str, client=None):
        if not (project_id and agent_id):
            raise ValueError("PROJECT_ID and AGENT_ID must be set for the Dialogflow CX agent.")
        self.project_id = project_id
        self.location = location or "global"
        self.agent_id = agent_id

        if client is None:
            endpoint = api_endpoint(self.location)
            options = ClientOptions(api_endpoint=endpoint) if endpoint else None
            client = dialogflowcx_v3.SessionsAsyncClient(client_options=options)
        self.client = client

    def session_path(self, session_id: str) -> str:
        return dialogflowcx_v3.SessionsClient.session_path(
            self.project_id, self.location, self.agent_id, session_id
        )

    async def detect_intent(self, request: IntentRequest) -> List[ResponseSegment]:
        detect_request = dialogflowcx_v3.DetectIntentRequest(
            session=request.session,
            query_input=dialogflowcx_v3.QueryInput(
                text=dialogflowcx_v3.TextInput(text=request.text),
                language_code=request.language_code,
            ),
        )
        try:
            response = await self.client.detect_intent(request=detect_request)
        except google_exceptions.GoogleAPIError as e:
            raise IntentDetectionError(f"detect_intent failed for {request.session}: {e}") from e

        return to_segments(response.query_result.response_messages)

    async def close(self) -> None:
        transport = getattr(self.client, "transport", None)
        if transport is not None:
            await transport.close()


register_agent("dialogflow_cx", DialogflowCXAgent)
