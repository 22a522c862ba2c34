"""Twilio-facing endpoints.

- TwiML webhook that connects an inbound call to the media-stream websocket.
- The media-stream websocket itself, one RelaySession per connection.
- Outbound call trigger.
"""

from __future__ import annotations

import logging
from typing import Annotated
from xml.sax.saxutils import quoteattr

from fastapi import APIRouter, Depends, Header, HTTPException, Request, Response, WebSocket

from api.dependencies import get_realtime_connector, get_session_config, get_twilio_cfg, get_twilio_client
from api.schemas import OutboundCallRequest, OutboundCallResponse, StatusResponse
from config.settings import get_settings
from integrations.twilio_client import TwilioConfig, place_outbound_call
from relay.realtime_events import SessionConfig
from relay.session import RealtimeConnector, RelaySession
from relay.transports import TelephonyTransport

LOGGER = logging.getLogger(__name__)

router = APIRouter(tags=["relay"])


def _twiml_response(xml: str) -> Response:
    # Twilio expects application/xml
    return Response(content=xml, media_type="application/xml")


def _to_ws_url(http_url: str) -> str:
    if http_url.startswith("https://"):
        return "wss://" + http_url.removeprefix("https://")
    if http_url.startswith("http://"):
        return "ws://" + http_url.removeprefix("http://")
    return http_url


def _media_stream_url(request: Request) -> str:
    settings = get_settings()
    if settings.public_base_url:
        return _to_ws_url(f"{settings.public_base_url.rstrip('/')}/media-stream")
    # Twilio only connects to secure websockets.
    host = request.headers.get("host") or request.url.netloc
    return f"wss://{host}/media-stream"


def _twiml_connect_stream(*, stream_url: str) -> str:
    return (
        "<?xml version=\"1.0\" encoding=\"UTF-8\"?>"
        "<Response>"
        "<Connect>"
        f"<Stream url={quoteattr(stream_url)} />"
        "</Connect>"
        "</Response>"
    )


@router.get("/", response_model=StatusResponse)
async def index() -> StatusResponse:
    return StatusResponse(message="Twilio Media Stream Server is running!")


@router.api_route("/incoming-call", methods=["GET", "POST"])
async def incoming_call(request: Request) -> Response:
    stream_url = _media_stream_url(request)
    LOGGER.info("Incoming call; streaming to %s", stream_url)
    return _twiml_response(_twiml_connect_stream(stream_url=stream_url))


@router.websocket("/media-stream")
async def media_stream(
    websocket: WebSocket,
    config: SessionConfig = Depends(get_session_config),
    connector: RealtimeConnector = Depends(get_realtime_connector),
) -> None:
    await websocket.accept()
    LOGGER.info("Client connected")

    settings = get_settings()
    session = RelaySession(
        TelephonyTransport(websocket),
        connector,
        config,
        init_delay_ms=settings.session_init_delay_ms,
        idle_timeout_seconds=settings.session_idle_timeout_seconds,
        show_timing_math=settings.show_timing_math,
        log_event_types=settings.log_event_types,
    )
    await session.run()


@router.post("/outbound-calls", response_model=OutboundCallResponse)
async def create_outbound_call(
    payload: OutboundCallRequest,
    x_api_key: Annotated[str | None, Header()] = None,
    twilio_client=Depends(get_twilio_client),
    cfg: TwilioConfig = Depends(get_twilio_cfg),
) -> OutboundCallResponse:
    settings = get_settings()

    if settings.outbound_call_api_key and x_api_key != settings.outbound_call_api_key:
        raise HTTPException(status_code=401, detail="Unauthorized")

    call_sid = place_outbound_call(twilio_client, cfg, payload.to_number, payload.from_number)
    return OutboundCallResponse(call_sid=call_sid, to_number=payload.to_number)
