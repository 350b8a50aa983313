"""
chaoskube module

chaoskube periodically kills a random pod in a Kubernetes cluster, so that
operators gain confidence their workloads survive the unplanned loss of an
instance.

This module contains:
 - actions that change the state of the cluster: picking a victim and
   terminating it (actions directory)
 - probes that gather and evaluate state: the pods eligible for termination
   and the time windows during which chaos is suppressed (probes directory)
 - selector expressions used to narrow down pods by label, annotation and
   namespace (selector.py file)
 - a client for the Kubernetes API (execute directory)
 - common defaults (common directory)
 - the loop tying it all together (chaoskube.py file) and its command line
   (cli.py file)

Every cycle fetches all pods, filters them, checks whether the current time
is excluded, picks one candidate at random and terminates it. In dry-run mode
the termination is only logged. Any error talking to the cluster ends the
loop: chaoskube does not retry, a supervisor is expected to restart it.
"""
