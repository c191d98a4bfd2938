import asyncio
import logging
import time
from typing import Callable, List, Optional

import numpy as np
from pydantic import ValidationError

from typespeed import messages
from typespeed.channel import Channel, IdleTimeoutError, Payload, TransportError
from typespeed.models import InputMessage, SessionOutcome, SessionState, SessionSummary
from typespeed.speed import NS_PER_SECOND, estimate


class SessionStateError(Exception):
    pass


class SessionClosedError(SessionStateError):
    pass


class TypingSession:
    """
    State of one typing attempt.

    Every operation returns the messages it produced, in order, and leaves
    sending them to the caller. The session never touches the connection.
    """

    def __init__(self, target_phrase: str):
        if not target_phrase:
            raise ValueError("target phrase must not be empty")
        self.target_phrase = target_phrase
        self.error_budget = len(target_phrase)
        self.timestamps: List[int] = []
        self.error_count = 0
        self.succeeded_at_least_once = False
        self.last_speed = 0
        self.state = SessionState.AWAITING_INPUT
        self.outcome: Optional[SessionOutcome] = None
        self._started = False

    @property
    def is_terminal(self) -> bool:
        return self.state in (SessionState.SUCCEEDED, SessionState.FAILED)

    @property
    def is_closed(self) -> bool:
        return self.state == SessionState.CLOSED

    def start(self) -> List[str]:
        if self._started:
            raise SessionStateError("session already started")
        self._started = True
        return [messages.text_to_type(self.target_phrase)]

    def on_input(self, raw: Payload, now_ns: int) -> List[str]:
        if self.state != SessionState.AWAITING_INPUT:
            raise SessionClosedError(f"session is {self.state.value}, no more input accepted")

        if self.timestamps and now_ns < self.timestamps[-1]:
            now_ns = self.timestamps[-1]
        self.timestamps.append(now_ns)

        try:
            event = InputMessage.model_validate_json(raw)
        except ValidationError as exc:
            logging.debug("Discarding malformed input: %s", exc.errors(include_url=False))
            return []

        typed = event.text
        if not typed or not self.target_phrase.startswith(typed):
            self.error_count += 1
            logging.debug("Validation miss %s/%s: %r", self.error_count, self.error_budget, typed)
            if self.error_count >= self.error_budget:
                self.state = SessionState.FAILED
                self.outcome = SessionOutcome.FAILURE
                logging.info("Error budget exhausted after %s events", len(self.timestamps))
                return self.finalize()
            return []

        self.last_speed = estimate(self.timestamps)
        outgoing = [messages.speed_update(self.last_speed)]

        if typed == self.target_phrase:
            self.state = SessionState.SUCCEEDED
            self.outcome = SessionOutcome.SUCCESS
            outgoing.extend(self.finalize())
        else:
            self.succeeded_at_least_once = True
        return outgoing

    def finalize(self) -> List[str]:
        if not self.is_terminal:
            raise SessionStateError(f"cannot finalize a session that is {self.state.value}")

        outgoing = [
            messages.verdict(self.state == SessionState.SUCCEEDED),
            messages.clear_input(),
        ]
        self.state = SessionState.CLOSED
        return outgoing

    def summary(self) -> SessionSummary:
        mean_interval_ms = 0.0
        interval_std_ms = 0.0
        if len(self.timestamps) > 1:
            intervals_ms = np.diff(np.asarray(self.timestamps, dtype=np.int64)) / (NS_PER_SECOND / 1000)
            mean_interval_ms = float(np.mean(intervals_ms))
            interval_std_ms = float(np.std(intervals_ms))

        return SessionSummary(
            phrase_length=len(self.target_phrase),
            events=len(self.timestamps),
            error_count=self.error_count,
            last_speed=self.last_speed,
            outcome=self.outcome,
            mean_interval_ms=mean_interval_ms,
            interval_std_ms=interval_std_ms,
        )


async def _receive(channel: Channel, idle_timeout: Optional[float]) -> Payload:
    if idle_timeout is None:
        return await channel.receive()
    try:
        return await asyncio.wait_for(channel.receive(), timeout=idle_timeout)
    except asyncio.TimeoutError as exc:
        raise IdleTimeoutError(f"no input for {idle_timeout} seconds") from exc


async def _send_all(channel: Channel, outgoing: List[str]) -> None:
    for message in outgoing:
        await channel.send(message)


async def run_session(
    channel: Channel,
    target_phrase: str,
    clock: Callable[[], int] = time.monotonic_ns,
    idle_timeout: Optional[float] = None,
) -> Optional[SessionSummary]:
    """
    Drive one session over ``channel`` until it is finalized.

    Returns the session summary, or None when the connection failed or went
    idle before a verdict was sent. The channel is always closed on return.
    """
    session = TypingSession(target_phrase)
    try:
        await _send_all(channel, session.start())
        while not session.is_closed:
            raw = await _receive(channel, idle_timeout)
            await _send_all(channel, session.on_input(raw, clock()))
    except IdleTimeoutError as exc:
        logging.warning("Session idle, closing: %s", exc)
        return None
    except TransportError as exc:
        logging.error("Session transport error: %s (state=%s, errors=%s)", exc, session.state.value, session.error_count)
        return None
    finally:
        await channel.close()

    summary = session.summary()
    logging.info(
        "Session finished: outcome=%s speed=%s errors=%s/%s events=%s mean_interval=%.1fms",
        summary.outcome.value if summary.outcome else None,
        summary.last_speed,
        summary.error_count,
        session.error_budget,
        summary.events,
        summary.mean_interval_ms,
    )
    return summary
