from collections import namedtuple
from logzero import logger
from types import MappingProxyType

from chaoskube.selector import Selector

from typing import Dict, Iterable, List

_Pod = namedtuple('Pod', ['namespace', 'name', 'labels', 'annotations'])


class Pod(_Pod):
    """
    A read-only snapshot of a pod, fetched fresh every cycle.
    """
    __slots__ = ()

    def __new__(cls, namespace: str, name: str,
                labels: Dict[str, str] = None,
                annotations: Dict[str, str] = None):
        return super().__new__(cls, namespace, name,
                               MappingProxyType(dict(labels or {})),
                               MappingProxyType(dict(annotations or {})))

    def __str__(self):
        return "{}/{}".format(self.namespace, self.name)


def pod_from_api_object(api_pod) -> Pod:
    """
    Build a Pod snapshot from a kubernetes.client.V1Pod

    :param api_pod: The pod as returned by the Kubernetes API.
    :type api_pod: kubernetes.client.V1Pod
    :return: Pod
    """
    metadata = api_pod.metadata
    return Pod(metadata.namespace, metadata.name,
               labels=metadata.labels, annotations=metadata.annotations)


def filter_pods(pods: Iterable[Pod], labels: Selector, annotations: Selector,
                namespaces: Selector) -> List[Pod]:
    """
    Return the pods that match all three selectors, in their original order.

    The namespace selector is evaluated against {"namespace": <namespace>}.

    :param pods: All pods currently known to the cluster.
        Required.
    :type pods: Iterable[Pod]
    :param labels: Selector applied to each pod's labels.
        Required.
    :type labels: Selector
    :param annotations: Selector applied to each pod's annotations.
        Required.
    :type annotations: Selector
    :param namespaces: Selector applied to each pod's namespace.
        Required.
    :type namespaces: Selector
    :return: List[Pod]
    """
    candidates = []
    for pod in pods:
        if not labels.matches(pod.labels):
            continue
        if not annotations.matches(pod.annotations):
            continue
        if not namespaces.matches({'namespace': pod.namespace}):
            continue
        candidates.append(pod)
    logger.debug("%d of the given pods match labels '%s', annotations '%s' "
                 "and namespaces '%s'", len(candidates), labels, annotations,
                 namespaces)
    return candidates
