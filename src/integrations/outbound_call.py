"""Command-line trigger for an outbound call that is connected to the relay."""

from __future__ import annotations

import argparse
import logging
import sys

from twilio.base.exceptions import TwilioRestException

from config.settings import get_settings
from integrations.twilio_client import build_twilio_client, get_twilio_config, place_outbound_call
from relay.errors import ConfigurationError

LOGGER = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Place a Twilio call that streams into the AI relay.")
    parser.add_argument("--to", required=True, dest="to_number", help="E.164 number to call")
    parser.add_argument("--from", dest="from_number", default=None, help="Sender number (defaults to TWILIO_FROM_NUMBER)")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        cfg = get_twilio_config()
        call_sid = place_outbound_call(build_twilio_client(cfg), cfg, args.to_number, args.from_number)
    except ConfigurationError as exc:
        LOGGER.error("%s", exc.detail)
        return 2
    except TwilioRestException as exc:
        LOGGER.error("Error initiating call: %s", exc)
        return 1

    print(call_sid)
    return 0


if __name__ == "__main__":
    sys.exit(main())
