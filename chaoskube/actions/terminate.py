from logzero import logger

from chaoskube.common import DEFAULT_CHAOS_GRACE_PERIOD
from chaoskube.execute.cluster import ClusterClient
from chaoskube.probes.pods import Pod


class Terminator(object):
    """
    Deletes a pod, or only announces the deletion in dry-run mode.

    Errors from the cluster are raised unchanged. Retrying is left to the
    caller.
    """

    def __init__(self, client: ClusterClient,
                 grace_period: int = DEFAULT_CHAOS_GRACE_PERIOD):
        self.client = client
        self.grace_period = grace_period

    def terminate(self, pod: Pod, dry_run: bool) -> None:
        """
        Terminate a pod.

        :param pod: The victim.
            Required.
        :type pod: Pod
        :param dry_run: Only log what would be done?
            Required.
        :type dry_run: bool
        :return: None
        """
        if dry_run:
            logger.info("Dry run: would terminate pod %s (grace period %ss)",
                        pod, self.grace_period)
            return

        logger.info("Terminating pod %s (grace period %ss)", pod,
                    self.grace_period)
        self.client.delete_pod(pod.namespace, pod.name,
                               grace_period=self.grace_period)
        logger.info("Deletion of pod %s requested", pod)
