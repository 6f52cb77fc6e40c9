"""
Control Session - handshake, periodic transmit loop, and disarm sequence.

The session is the only writer of the UDP channel. It:
- Opens the channel and sends the wake packet plus one neutral frame
- Sends one control frame per tick from the input provider's latest snapshot
- On shutdown, sends a single disarm frame and waits out the grace delay

State machine (one-way):

    IDLE -> HANDSHAKING -> STREAMING -> DISARMING -> TERMINATED

This is safety-critical code: every exit path goes through DISARMING once
the channel is up.
"""

import asyncio
import logging
import threading
from typing import Any, Callable, Optional

from .codec import (
    describe_frame,
    encode_disarm_frame,
    encode_frame,
    neutral_template,
    validate_frame,
    wake_packet,
)
from .errors import TransmitError
from .interfaces import Channel, InputProvider
from .types import AxisState, REST_AXIS, SessionConfig, SessionState


logger = logging.getLogger(__name__)


class ControlSession:
    """
    Live control session with one drone.

    Create it once pairing succeeded, then await run(). Any thread may call
    request_shutdown().
    """

    def __init__(
        self,
        channel: Channel,
        input_provider: InputProvider,
        config: Optional[SessionConfig] = None,
    ) -> None:
        """
        Initialize session.

        Args:
            channel: Datagram channel to the drone (not yet open)
            input_provider: Source of axis snapshots
            config: Session configuration

        Raises:
            ProtocolError: configured frame template is malformed
        """
        self.channel = channel
        self.input = input_provider
        self.config = config or SessionConfig()

        self._template = self.config.frame_template or neutral_template()
        self._wake = self.config.wake_packet or wake_packet()
        validate_frame(self._template)

        self.state = SessionState.IDLE
        self._shutdown = threading.Event()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._wakeup: Optional[asyncio.Event] = None
        self._input_started = False
        self._last_axis: AxisState = REST_AXIS

        # Counters for status display and tests
        self.frames_sent = 0
        self.send_failures = 0

        self._state_callbacks: list[Callable[[SessionState, SessionState], Any]] = []

    def add_state_callback(self, callback: Callable[[SessionState, SessionState], Any]) -> None:
        """
        Register callback for state changes.

        Callback signature: callback(old_state, new_state)
        """
        self._state_callbacks.append(callback)

    def request_shutdown(self) -> None:
        """
        Ask the session to disarm and terminate.

        Idempotent and thread-safe. The transmit loop wakes up immediately
        instead of waiting for the next tick.
        """
        if self._shutdown.is_set():
            return
        self._shutdown.set()
        logger.info("Shutdown requested")

        loop = self._loop
        wakeup = self._wakeup
        if loop is not None and wakeup is not None and not loop.is_closed():
            loop.call_soon_threadsafe(wakeup.set)

    @property
    def shutdown_requested(self) -> bool:
        return self._shutdown.is_set()

    async def run(self) -> None:
        """
        Run the whole session, from channel open to termination.

        Raises:
            ChannelOpenError: channel could not be opened (nothing was sent)
            TransmitError: wake or baseline frame could not be sent
        """
        if self.state != SessionState.IDLE:
            raise RuntimeError(f"Session cannot run from state {self.state.value}")

        self._wakeup = asyncio.Event()
        self._loop = asyncio.get_running_loop()
        if self._shutdown.is_set():
            self._wakeup.set()

        try:
            await self.input.start(on_quit=self.request_shutdown)
            self._input_started = True

            self._handshake()
            try:
                await self._stream()
            finally:
                await self._disarm()
        finally:
            await self._terminate()

    def _handshake(self) -> None:
        """HANDSHAKING - open channel, wake the drone, send the baseline frame"""
        self._transition_to(SessionState.HANDSHAKING)
        self.channel.open()

        self.channel.send(self._wake)
        logger.info("Connected to drone!")

        baseline = encode_frame(self._template, REST_AXIS)
        validate_frame(baseline)
        self.channel.send(baseline)
        self.frames_sent += 1
        logger.debug(f"Baseline frame: {describe_frame(baseline)}")

        # No acknowledgment exists; streaming starts right away
        self._transition_to(SessionState.STREAMING)

    async def _stream(self) -> None:
        """STREAMING - one frame per tick until shutdown is requested"""
        interval = self.config.tick_interval
        next_tick = self._loop.time() + interval

        while True:
            await self._wait_until(next_tick)
            if self._shutdown.is_set():
                return

            fired = self._loop.time()
            axis = self._read_axis()
            # Providers may request quit from inside get_axis_state()
            if self._shutdown.is_set():
                return
            self._transmit(encode_frame(self._template, axis))

            # Late ticks are not caught up, the next one is just late too
            next_tick = fired + interval

    async def _wait_until(self, deadline: float) -> None:
        """Sleep until deadline or until shutdown wakes us"""
        delay = deadline - self._loop.time()
        if delay <= 0:
            return
        try:
            await asyncio.wait_for(self._wakeup.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass

    def _read_axis(self) -> AxisState:
        """Latest snapshot from the input provider, or the last good one"""
        try:
            axis = self.input.get_axis_state()
        except Exception as e:
            logger.error(f"Input provider failed, reusing last axis state: {e}", exc_info=True)
            return self._last_axis

        if axis is not None:
            self._last_axis = axis
        return self._last_axis

    def _transmit(self, frame: bytes) -> bool:
        """Send one frame; send failures are logged, never raised"""
        validate_frame(frame)
        try:
            self.channel.send(frame)
        except TransmitError as e:
            self.send_failures += 1
            logger.error(f"Failed to send frame: {e}")
            return False

        self.frames_sent += 1
        logger.debug(f"TX {describe_frame(frame)}")
        return True

    async def _disarm(self) -> None:
        """DISARMING - one disarm frame, then the grace delay"""
        if not self.channel.is_open:
            return

        self._shutdown.set()
        self._transition_to(SessionState.DISARMING)
        logger.info("Disarming drone...")
        self._transmit(encode_disarm_frame(self._template))

        # Nothing acknowledges the disarm frame; give it time to arrive
        await asyncio.sleep(self.config.disarm_grace)

    async def _terminate(self) -> None:
        """TERMINATED - close channel, stop input"""
        try:
            self.channel.close()
            if self._input_started:
                await self.input.stop()
                self._input_started = False
        except Exception as e:
            logger.error(f"Error during cleanup: {e}", exc_info=True)
        finally:
            self._transition_to(SessionState.TERMINATED)
            self._loop = None

    def _transition_to(self, new_state: SessionState) -> None:
        """
        Transition to new state.

        Args:
            new_state: State to transition to
        """
        if new_state == self.state:
            return

        old_state = self.state
        logger.info(f"State transition: {old_state.value} -> {new_state.value}")
        self.state = new_state

        for callback in self._state_callbacks:
            try:
                callback(old_state, new_state)
            except Exception as e:
                logger.error(f"Error in state callback: {e}", exc_info=True)
