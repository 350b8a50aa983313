"""
Chaos 'actions' module.

This module contains *actions* that change the state of a Kubernetes cluster:
choosing a victim among the eligible pods and terminating it.

*Actions* applied to a cluster should not cause predictable failure. The
purpose of terminating a random pod is to expose workloads that do not
survive the unplanned loss of an instance. If systemic failure is the result,
either a bug exists or the interval is too aggressive.

Things to consider when adding or modifying *actions*:
1. *Actions* could/may be used outside of the chaoskube loop for other kinds
   of integration or systems testing. Therefore, *actions* should be written
   in a way they can be reused on their own.
"""
