"""
Watch Scheduler - Background loop that keeps one subscription up to date.

Each watch runs on its own daemon thread. Token renewal and change polling
are two deadlines on that single thread, so renew, probe and notify never
overlap for the same subscription and callbacks arrive in detection order.
"""

import logging
import threading
import time
from enum import Enum
from typing import Optional

from nacos_watch.core.config_endpoint import ConfigEndpoint
from nacos_watch.core.listener import LongPollSubscription
from nacos_watch.core.session import Session
from nacos_watch.exceptions import NacosWatchError
from nacos_watch.models.subscription import Subscription
from nacos_watch.utils.fingerprint import fingerprint, has_changed

DEFAULT_POLL_INTERVAL = 10.0


class WatchState(Enum):
    INITIALIZING = 'initializing'
    WATCHING = 'watching'
    NOTIFYING = 'notifying'
    STOPPED = 'stopped'


class WatchScheduler:
    """Drives initial fetch, renewal, probing and callback delivery for one watch."""

    def __init__(
        self,
        subscription: Subscription,
        endpoint: ConfigEndpoint,
        listener: LongPollSubscription,
        session: Session,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the scheduler.

        Args:
            subscription: Entry to watch and the callback to notify
            endpoint: Used for the initial fetch and re-fetches after a change
            listener: Long-poll prober; owns the watch's dedicated transport
            session: Shared session, renewed on the renewal cadence
            poll_interval: Seconds between probes
            logger: Optional injected logger
        """
        self.subscription = subscription
        self.endpoint = endpoint
        self.listener = listener
        self.session = session
        self.poll_interval = poll_interval
        self.logger = logger or logging.getLogger('WatchScheduler')

        self.state = WatchState.INITIALIZING
        self.notifications = 0
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def initialize(self) -> str:
        """
        Fetch the current content and record its fingerprint.

        Returns:
            The initial content

        Raises:
            NacosWatchError: Any fetch failure; the watch is not started
        """
        sub = self.subscription
        content = self.endpoint.fetch(sub.namespace, sub.group, sub.data_id)
        sub.last_fingerprint = fingerprint(content)
        self.state = WatchState.WATCHING
        self.logger.info(f"Watching {sub.data_id}", extra=sub.log_context())
        return content

    def start(self) -> None:
        """Start the background loop. initialize() must have succeeded."""
        if self.state is not WatchState.WATCHING:
            raise RuntimeError('Watch must be initialized before it is started')
        if self._thread is not None:
            return

        sub = self.subscription
        self._thread = threading.Thread(
            target=self._run,
            daemon=True,
            name=f"watch-{sub.namespace or 'public'}-{sub.group}-{sub.data_id}",
        )
        self._thread.start()

    def cancel(self) -> None:
        """
        Signal the loop to stop without waiting for it.

        The dedicated transport is closed right away, which releases a
        long-poll that is still being held by the server.
        """
        self._stop_event.set()
        self.listener.http.close()

    def stop(self, timeout: Optional[float] = None) -> None:
        """
        Stop both timers and wait for the loop thread to exit.

        A probe already in flight is abandoned: its answer is discarded and
        no callback follows it.

        Args:
            timeout: Seconds to wait for the thread; None waits for it to exit
        """
        self.cancel()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        if thread is None:
            self._close()

    def renew_once(self) -> bool:
        """
        Run one renewal firing.

        Returns:
            True if the session was renewed
        """
        try:
            self.session.force_renew()
            return True
        except NacosWatchError as e:
            # The next request retries through ensure_valid
            self.logger.error(
                f"Scheduled token renewal failed: {e}",
                extra=self.subscription.log_context()
            )
            return False

    def poll_once(self) -> bool:
        """
        Run one poll firing: probe, and on a change re-fetch and notify.

        Returns:
            True if the callback was invoked
        """
        sub = self.subscription
        try:
            result = self.listener.probe(sub)
        except NacosWatchError as e:
            if self._stop_event.is_set():
                return False
            self.logger.error(f"Listen on {sub.data_id} failed: {e}", extra=sub.log_context())
            return False

        if self._stop_event.is_set() or not result.changed:
            return False
        return self._notify()

    def _notify(self) -> bool:
        sub = self.subscription
        self.state = WatchState.NOTIFYING
        try:
            try:
                content = self.endpoint.fetch(sub.namespace, sub.group, sub.data_id)
            except NacosWatchError as e:
                # Keep the old fingerprint so the next probe reports the change again
                self.logger.error(
                    f"Re-fetch of changed {sub.data_id} failed: {e}",
                    extra=sub.log_context()
                )
                return False

            new_fingerprint = fingerprint(content)
            if not has_changed(sub.last_fingerprint, new_fingerprint):
                self.logger.debug(
                    f"{sub.data_id} reported changed but content is identical",
                    extra=sub.log_context()
                )
                return False

            self.logger.info(
                f"Config {sub.data_id} changed: {sub.last_fingerprint} -> {new_fingerprint}",
                extra=sub.log_context()
            )
            sub.last_fingerprint = new_fingerprint
            self.notifications += 1
            try:
                sub.callback(content)
            except Exception:
                self.logger.exception(
                    f"Callback for {sub.data_id} raised",
                    extra=sub.log_context()
                )
            return True
        finally:
            self.state = WatchState.WATCHING

    def _renewal_delay(self) -> Optional[float]:
        remaining = self.session.remaining_lifetime()
        if remaining is None:
            return None
        return max(remaining, self.poll_interval)

    def _run(self) -> None:
        clock = time.monotonic
        next_poll = clock() + self.poll_interval
        renewal_delay = self._renewal_delay()
        next_renew = clock() + renewal_delay if renewal_delay is not None else None

        try:
            while not self._stop_event.is_set():
                deadline = next_poll if next_renew is None else min(next_poll, next_renew)
                if self._stop_event.wait(max(0.0, deadline - clock())):
                    break

                try:
                    now = clock()
                    if next_renew is not None and now >= next_renew:
                        self.renew_once()
                        next_renew = clock() + self._renewal_delay()
                    if now >= next_poll:
                        self.poll_once()
                        next_poll = clock() + self.poll_interval
                except Exception:
                    self.logger.exception(
                        'Unexpected error in watch loop',
                        extra=self.subscription.log_context()
                    )
                    next_poll = clock() + self.poll_interval
        finally:
            self._close()
            self.logger.info(
                f"Stopped watching {self.subscription.data_id}",
                extra=self.subscription.log_context()
            )

    def _close(self) -> None:
        self.state = WatchState.STOPPED
        self.listener.http.close()


class WatchHandle:
    """What watch registration hands back: inspect the watch or stop it."""

    def __init__(self, scheduler: WatchScheduler):
        self._scheduler = scheduler

    @property
    def subscription(self) -> Subscription:
        return self._scheduler.subscription

    @property
    def last_fingerprint(self) -> str:
        return self._scheduler.subscription.last_fingerprint

    @property
    def state(self) -> WatchState:
        return self._scheduler.state

    @property
    def is_running(self) -> bool:
        return self._scheduler.is_running

    def cancel(self) -> None:
        self._scheduler.cancel()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._scheduler.stop(timeout)

    def __repr__(self) -> str:
        sub = self.subscription
        return f"WatchHandle({sub.namespace!r}, {sub.group!r}, {sub.data_id!r}, state={self.state.value})"
