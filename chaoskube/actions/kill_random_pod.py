import random
import time

from logzero import logger

from chaoskube.probes.pods import Pod

from typing import Optional, Sequence


class VictimSelector(object):
    """
    Picks one pod uniformly at random from a list of candidates.

    The random source is owned by the selector and seeded once. For a fixed
    seed and a fixed candidate order the sequence of victims is reproducible.
    """

    def __init__(self, seed: int = None, rng: random.Random = None):
        if rng is None:
            if seed is None:
                seed = time.time_ns()
            rng = random.Random(seed)
        self.seed = seed
        self.rng = rng

    def pick_victim(self, candidates: Sequence[Pod]) -> Optional[Pod]:
        """
        Return a randomly chosen candidate, or None if there are none.

        :param candidates: The pods eligible for termination.
            Required.
        :type candidates: Sequence[Pod]
        :return: Optional[Pod]
        """
        if not candidates:
            return None
        index = self.rng.randrange(len(candidates))
        victim = candidates[index]
        logger.debug("Picked candidate %d of %d: %s", index, len(candidates),
                     victim)
        return victim
