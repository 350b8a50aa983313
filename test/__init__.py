from contextlib import contextmanager

from chaoskube.execute.cluster import ClusterClient
from chaoskube.probes.pods import Pod


@contextmanager
def patch(owner, attr, value):
    """Monkey patch context manager.

    with patch(os, 'open', myopen):
        ...
    """
    old = getattr(owner, attr)
    setattr(owner, attr, value)
    try:
        yield getattr(owner, attr)
    finally:
        setattr(owner, attr, old)


def new_pod(namespace, name, labels=None, annotations=None):
    """A pod for testing purposes, labeled app=<name> and annotated chaos=<name>."""
    if labels is None:
        labels = {'app': name}
    if annotations is None:
        annotations = {'chaos': name}
    return Pod(namespace, name, labels=labels, annotations=annotations)


class FakeClient(ClusterClient):
    """In-memory cluster that records deletions."""

    def __init__(self, pods=(), list_error=None, delete_error=None):
        self.pods = list(pods)
        self.list_error = list_error
        self.delete_error = delete_error
        self.listed = []
        self.deleted = []

    def _list_pods(self, namespace=None):
        self.listed.append(namespace)
        if self.list_error:
            raise self.list_error
        return [p for p in self.pods if not namespace or p.namespace == namespace]

    def _delete_pod(self, namespace, name, grace_period=None):
        if self.delete_error:
            raise self.delete_error
        self.deleted.append((namespace, name, grace_period))
        self.pods = [p for p in self.pods
                     if (p.namespace, p.name) != (namespace, name)]
