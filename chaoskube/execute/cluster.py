import abc
import os

from kubernetes import client, config
from logzero import logger

from chaoskube.probes.pods import Pod, pod_from_api_object

from typing import List

RECOMMENDED_KUBECONFIG = os.path.join(os.path.expanduser('~'), '.kube',
                                      'config')


class ClusterClient(object, metaclass=abc.ABCMeta):

    def list_pods(self, namespace: str = None) -> List[Pod]:
        pods = self._list_pods(namespace)
        logger.debug("Fetched %d pods from %s", len(pods),
                     "namespace " + namespace if namespace else "all namespaces")
        return pods

    def delete_pod(self, namespace: str, name: str, grace_period: int = None):
        self._delete_pod(namespace, name, grace_period)

    @abc.abstractmethod
    def _list_pods(self, namespace: str = None) -> List[Pod]:
        raise NotImplementedError('users must define _list_pods to use this base class')

    @abc.abstractmethod
    def _delete_pod(self, namespace: str, name: str, grace_period: int = None):
        raise NotImplementedError('users must define _delete_pod to use this base class')


class KubernetesClient(ClusterClient):
    """
    Talks to a Kubernetes cluster through the official Python client.
    """

    def __init__(self, master: str = None, kubeconfig: str = None,
                 api: client.CoreV1Api = None):
        if api is None:
            api = client.CoreV1Api(KubernetesClient._create_api_client(
                master=master, kubeconfig=kubeconfig))
        self.api = api

    @staticmethod
    def _create_api_client(master=None, kubeconfig=None) -> client.ApiClient:
        if not kubeconfig and os.access(RECOMMENDED_KUBECONFIG, os.R_OK):
            kubeconfig = RECOMMENDED_KUBECONFIG

        configuration = client.Configuration()
        if kubeconfig:
            KubernetesClient._is_readable_file(kubeconfig, 'kubeconfig')
            config.load_kube_config(config_file=kubeconfig,
                                    client_configuration=configuration)
        elif not master:
            # In-cluster only when neither master nor kubeconfig is given
            config.load_incluster_config(client_configuration=configuration)
        if master:
            configuration.host = master

        logger.info("Targeting cluster at %s", configuration.host)
        return client.ApiClient(configuration)

    @staticmethod
    def _is_readable_file(path, file_kind):
        if not isinstance(path, str):
            raise ValueError("path to file must be a string")

        if os.access(path, os.R_OK):
            if os.path.isfile(path):
                return
            else:
                raise OSError("Path is not to a file -- '%s'" % str(path))
        else:
            raise OSError("Unable to access the file (not readable) -- %s -- '%s'" % (file_kind, path))

    def _list_pods(self, namespace: str = None) -> List[Pod]:
        if namespace:
            response = self.api.list_namespaced_pod(namespace, watch=False)
        else:
            response = self.api.list_pod_for_all_namespaces(watch=False)
        return [pod_from_api_object(item) for item in response.items]

    def _delete_pod(self, namespace: str, name: str, grace_period: int = None):
        body = client.V1DeleteOptions(grace_period_seconds=grace_period)
        self.api.delete_namespaced_pod(name, namespace, body=body)
