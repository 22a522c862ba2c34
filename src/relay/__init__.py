"""Per-call relay between Twilio Media Streams and a realtime speech AI session.

Dependency order inside this package (leaves first):
telephony_events / realtime_events -> timestamps -> marks -> state -> interruption -> session.
"""
