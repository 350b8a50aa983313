import logging
import random

import pytest

from datetime import datetime, time
from dateutil import tz

from chaoskube.chaoskube import Chaoskube, State
from chaoskube.common import CycleOutcome
from chaoskube.probes.time_window import TimePeriod, TimeWindowPolicy
from chaoskube.selector import parse_selector
from test import FakeClient, new_pod

# 2017-06-19 is a Monday, 2017-06-17 a Saturday
MONDAY = datetime(2017, 6, 19, 12, 0, tzinfo=tz.UTC)
SATURDAY = datetime(2017, 6, 17, 12, 0, tzinfo=tz.UTC)


class StopLoop(Exception):
    pass


def stop_after(cycles):
    calls = []

    def sleep(interval):
        calls.append(interval)
        if len(calls) >= cycles:
            raise StopLoop()
    sleep.calls = calls
    return sleep


def seed_drawing(index, length):
    return next(s for s in range(1000)
                if random.Random(s).randrange(length) == index)


@pytest.fixture
def pods():
    return [
        new_pod('default', 'a', labels={'tier': 'web'}),
        new_pod('default', 'b', labels={'tier': 'db'}),
        new_pod('kube-system', 'c', labels={'tier': 'web'}),
    ]


def new_chaoskube(client, dry_run=False, now=MONDAY, **kwargs):
    return Chaoskube(client, dry_run=dry_run, now=lambda: now, **kwargs)


def test_candidates(pods):
    chaoskube = new_chaoskube(FakeClient(pods),
                              labels=parse_selector('tier=web'))
    assert [p.name for p in chaoskube.candidates()] == ['a', 'c']
    assert chaoskube.state == State.FILTERING


def test_candidates_without_filters(pods):
    chaoskube = new_chaoskube(FakeClient(pods))
    assert chaoskube.candidates() == pods


def test_candidates_by_namespace(pods):
    chaoskube = new_chaoskube(FakeClient(pods),
                              namespaces=parse_selector('namespace!=kube-system'))
    assert [p.name for p in chaoskube.candidates()] == ['a', 'b']


def test_candidates_by_annotation(pods):
    chaoskube = new_chaoskube(FakeClient(pods),
                              annotations=parse_selector('chaos in (b,c)'))
    assert [p.name for p in chaoskube.candidates()] == ['b', 'c']


def test_namespace_scope_is_passed_to_client(pods):
    client = FakeClient(pods)
    chaoskube = new_chaoskube(client, namespace_scope='kube-system')
    assert [p.name for p in chaoskube.candidates()] == ['c']
    assert client.listed == ['kube-system']


def test_scenario_a_filter_and_pick_first_candidate(pods):
    client = FakeClient(pods)
    chaoskube = new_chaoskube(client, labels=parse_selector('tier=web'),
                              seed=seed_drawing(0, 2), grace_period=5)
    assert chaoskube.terminate_victim() == CycleOutcome.TERMINATED
    assert client.deleted == [('default', 'a', 5)]
    assert chaoskube.state == State.TERMINATING


def test_scenario_b_excluded_weekday_suppresses_termination(pods, caplog):
    caplog.set_level(logging.INFO)
    client = FakeClient(pods)
    policy = TimeWindowPolicy(excluded_weekdays=[5, 6])
    chaoskube = new_chaoskube(client, time_window=policy, now=SATURDAY)
    assert chaoskube.terminate_victim() == CycleOutcome.SUPPRESSED
    assert client.deleted == []
    assert chaoskube.state == State.CHECKING_WINDOW
    assert 'Chaos suppressed: sat is an excluded weekday' in caplog.text


def test_excluded_hours_suppress_termination(pods):
    client = FakeClient(pods)
    policy = TimeWindowPolicy(excluded_hours=[TimePeriod(time(11), time(13))])
    chaoskube = new_chaoskube(client, time_window=policy)
    assert chaoskube.terminate_victim() == CycleOutcome.SUPPRESSED
    assert client.deleted == []


def test_scenario_c_no_candidates_keeps_looping(pods, caplog):
    caplog.set_level(logging.INFO)
    client = FakeClient(pods)
    chaoskube = new_chaoskube(client, labels=parse_selector('tier=cache'))
    sleep = stop_after(3)
    with pytest.raises(StopLoop):
        chaoskube.run(60, sleep=sleep)
    assert sleep.calls == [60, 60, 60]
    assert client.deleted == []
    assert chaoskube.state == State.SLEEPING
    assert caplog.text.count('nothing to terminate') == 3


def test_no_candidates_outcome():
    chaoskube = new_chaoskube(FakeClient([]))
    assert chaoskube.terminate_victim() == CycleOutcome.NO_CANDIDATES
    assert chaoskube.state == State.SELECTING


def test_dry_run_does_not_delete(pods, caplog):
    caplog.set_level(logging.INFO)
    client = FakeClient(pods)
    chaoskube = new_chaoskube(client, dry_run=True)
    assert chaoskube.terminate_victim() == CycleOutcome.TERMINATED
    assert client.deleted == []
    assert 'Dry run: would terminate pod' in caplog.text


def test_dry_run_is_the_default(pods):
    client = FakeClient(pods)
    chaoskube = Chaoskube(client, now=lambda: MONDAY)
    chaoskube.terminate_victim()
    assert client.deleted == []


def test_one_termination_per_cycle(pods):
    client = FakeClient(pods)
    chaoskube = new_chaoskube(client, seed=1000)
    with pytest.raises(StopLoop):
        chaoskube.run(1, sleep=stop_after(2))
    assert len(client.deleted) == 2
    assert len(client.pods) == 1


def test_same_seed_same_victims(pods):
    first, second = FakeClient(pods), FakeClient(pods)
    for client in (first, second):
        chaoskube = new_chaoskube(client, seed=42)
        with pytest.raises(StopLoop):
            chaoskube.run(1, sleep=stop_after(3))
    assert first.deleted == second.deleted


def test_fetch_error_is_fatal(pods):
    error = ConnectionError('cluster unreachable')
    client = FakeClient(pods, list_error=error)
    chaoskube = new_chaoskube(client)
    sleep = stop_after(10)
    with pytest.raises(ConnectionError) as e:
        chaoskube.run(1, sleep=sleep)
    assert e.value is error
    assert chaoskube.state == State.FATAL
    assert sleep.calls == []


def test_termination_error_is_fatal(pods):
    error = PermissionError('forbidden')
    client = FakeClient(pods, delete_error=error)
    chaoskube = new_chaoskube(client)
    sleep = stop_after(10)
    with pytest.raises(PermissionError):
        chaoskube.run(1, sleep=sleep)
    assert chaoskube.state == State.FATAL
    assert sleep.calls == []


def test_termination_error_in_dry_run_cannot_happen(pods):
    client = FakeClient(pods, delete_error=PermissionError('forbidden'))
    chaoskube = new_chaoskube(client, dry_run=True)
    assert chaoskube.terminate_victim() == CycleOutcome.TERMINATED


def test_window_is_evaluated_every_cycle(pods):
    moments = iter([SATURDAY, MONDAY])
    client = FakeClient(pods)
    chaoskube = Chaoskube(client, dry_run=False, now=lambda: next(moments),
                          time_window=TimeWindowPolicy(excluded_weekdays=[5]))
    assert chaoskube.terminate_victim() == CycleOutcome.SUPPRESSED
    assert chaoskube.terminate_victim() == CycleOutcome.TERMINATED
    assert len(client.deleted) == 1
