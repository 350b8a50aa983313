"""
Chaos 'probes' module.

Probes gather and evaluate cluster and clock state without changing it: the
pods that are eligible for termination and whether the current time falls
into an excluded window.
"""
