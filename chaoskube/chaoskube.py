import time

from datetime import datetime, timezone
from enum import Enum
from logzero import logger

from chaoskube.actions.kill_random_pod import VictimSelector
from chaoskube.actions.terminate import Terminator
from chaoskube.common import CycleOutcome, DEFAULT_CHAOS_DRY_RUN, \
    DEFAULT_CHAOS_GRACE_PERIOD
from chaoskube.execute.cluster import ClusterClient
from chaoskube.probes.pods import Pod, filter_pods
from chaoskube.probes.time_window import TimeWindowPolicy
from chaoskube.selector import Selector, everything

from typing import Callable, List, Optional


class State(Enum):
    """
    The steps of a chaos cycle.
    """
    IDLE = 1
    FETCHING = 2
    FILTERING = 3
    CHECKING_WINDOW = 4
    SELECTING = 5
    TERMINATING = 6
    SLEEPING = 7
    # Reached on any fetch or termination error. The loop stops.
    FATAL = 8


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Chaoskube(object):
    """
    Periodically terminates a random pod.

    Each cycle fetches all pods, narrows them down with the label, annotation
    and namespace selectors, skips the cycle if the current time is excluded,
    picks one candidate at random and terminates it. Fetch and termination
    errors are not retried: they end the loop and are raised to the caller.
    """

    def __init__(self, client: ClusterClient,
                 labels: Selector = None,
                 annotations: Selector = None,
                 namespaces: Selector = None,
                 time_window: TimeWindowPolicy = None,
                 dry_run: bool = DEFAULT_CHAOS_DRY_RUN,
                 seed: int = None,
                 grace_period: int = DEFAULT_CHAOS_GRACE_PERIOD,
                 namespace_scope: str = None,
                 now: Callable[[], datetime] = utcnow):
        self.client = client
        self.labels = labels or everything()
        self.annotations = annotations or everything()
        self.namespaces = namespaces or everything()
        self.time_window = time_window or TimeWindowPolicy()
        self.dry_run = dry_run
        self.namespace_scope = namespace_scope
        self.selector = VictimSelector(seed=seed)
        self.terminator = Terminator(client, grace_period=grace_period)
        self.now = now
        self.state = State.IDLE

    def _transition(self, state: State):
        logger.debug("%s -> %s", self.state.name, state.name)
        self.state = state

    def candidates(self) -> List[Pod]:
        """
        Fetch all pods and return those matching every selector.

        :return: List[Pod]
        """
        self._transition(State.FETCHING)
        pods = self.client.list_pods(self.namespace_scope)

        self._transition(State.FILTERING)
        return filter_pods(pods, self.labels, self.annotations,
                           self.namespaces)

    def victim(self, candidates: List[Pod]) -> Optional[Pod]:
        self._transition(State.SELECTING)
        return self.selector.pick_victim(candidates)

    def terminate_victim(self) -> CycleOutcome:
        """
        Run a single chaos cycle.

        :return: CycleOutcome
        """
        candidates = self.candidates()
        logger.debug("Found %d candidate pods", len(candidates))

        self._transition(State.CHECKING_WINDOW)
        reason = self.time_window.exclusion_reason(self.now())
        if reason:
            logger.info("Chaos suppressed: %s", reason)
            return CycleOutcome.SUPPRESSED

        victim = self.victim(candidates)
        if victim is None:
            logger.info("No eligible pods found, nothing to terminate")
            return CycleOutcome.NO_CANDIDATES

        self._transition(State.TERMINATING)
        logger.info("Selected victim: %s", victim)
        self.terminator.terminate(victim, self.dry_run)
        return CycleOutcome.TERMINATED

    def run(self, interval: float, sleep: Callable[[float], None] = time.sleep):
        """
        Run chaos cycles forever, sleeping interval seconds between them.

        Only returns by raising the error that ended the loop.

        :param interval: Seconds to sleep between cycles.
            Required.
        :type interval: float
        """
        while True:
            try:
                self.terminate_victim()
            except Exception:
                self._transition(State.FATAL)
                logger.error("Chaos cycle failed in an unrecoverable way. "
                             "Stopping.")
                raise

            self._transition(State.SLEEPING)
            logger.debug("Sleeping for %ss...", interval)
            sleep(interval)
