import pytest

from checkout_sim.effects import Schedule
from checkout_sim.entities import Customer, ServiceComplete
from checkout_sim.errors import ConfigError
from checkout_sim.sampling import Sampler
from checkout_sim.stations import (
    ScanTime,
    arrive,
    cashier_timer,
    close_out,
    complete_service,
    make_bank,
)

ONE_SECOND = ScanTime(1.0, 1.0)


def _completion(effects):
    [sched] = [e for e in effects if isinstance(e, Schedule)]
    return sched


def test_deterministic_single_cashier_timeline():
    srv = make_bank(1)[0]
    s = Sampler(0)
    c1 = Customer(1, 1, 0.0)
    c2 = Customer(2, 1, 0.5)
    c3 = Customer(3, 1, 3.0)

    _, eff = arrive(srv, c1, 0.0, s, ONE_SECOND)
    sched = _completion(eff)
    assert sched.delay == 1.0
    assert sched.event == ServiceComplete(0)
    assert sched.timer == cashier_timer(0)

    _, eff = arrive(srv, c2, 0.5, s, ONE_SECOND)
    assert not any(isinstance(e, Schedule) for e in eff)
    assert list(srv.queue) == [c2]

    _, eff = complete_service(srv, 1.0, s, ONE_SECOND)
    assert srv.current is c2 and srv.busy
    assert c2.wait == pytest.approx(0.5)
    assert _completion(eff).delay == 1.0

    _, eff = complete_service(srv, 2.0, s, ONE_SECOND)
    assert not srv.busy and srv.current is None
    assert srv.idle_start == 2.0

    arrive(srv, c3, 3.0, s, ONE_SECOND)
    assert c3.wait == 0.0
    complete_service(srv, 4.0, s, ONE_SECOND)

    assert c1.service_start == 0.0 and c1.wait == 0.0
    assert srv.served == 3
    assert srv.service_time == pytest.approx(3.0)
    assert srv.idle_time == pytest.approx(1.0)

    close_out(srv, 6.0)
    assert srv.idle_time == pytest.approx(3.0)
    assert srv.idle_time + srv.service_time == pytest.approx(6.0)


def test_no_idle_gap_between_back_to_back_customers():
    srv = make_bank(1)[0]
    s = Sampler(0)
    arrive(srv, Customer(1, 1, 0.0), 0.0, s, ONE_SECOND)
    arrive(srv, Customer(2, 1, 0.0), 0.0, s, ONE_SECOND)
    complete_service(srv, 1.0, s, ONE_SECOND)
    complete_service(srv, 2.0, s, ONE_SECOND)
    assert srv.idle_time == 0.0


def test_service_duration_sums_per_item_scans():
    srv = make_bank(1)[0]
    cust = Customer(1, 5, 0.0)
    arrive(srv, cust, 0.0, Sampler(3), ScanTime(0.5, 2.0))
    assert 2.5 <= cust.service_duration <= 10.0
    big = Customer(2, 4, 0.0)
    arrive(make_bank(1)[0], big, 0.0, Sampler(0), ONE_SECOND)
    assert big.service_duration == pytest.approx(4.0)


def test_close_out_busy_cashier_keeps_customer_unfinished():
    srv = make_bank(1)[0]
    s = Sampler(0)
    arrive(srv, Customer(1, 3, 1.0), 1.0, s, ONE_SECOND)
    arrive(srv, Customer(2, 1, 1.5), 1.5, s, ONE_SECOND)
    close_out(srv, 2.5)
    assert srv.served == 0
    assert srv.service_time == 0.0
    assert srv.open_busy_time == pytest.approx(1.5)
    assert srv.idle_time == pytest.approx(1.0)
    assert srv.idle_time + srv.open_busy_time == pytest.approx(2.5)
    assert srv.served + len(srv.queue) + 1 == srv.assigned


def test_close_out_is_idempotent():
    srv = make_bank(1)[0]
    close_out(srv, 5.0)
    close_out(srv, 5.0)
    assert srv.idle_time == 5.0


def test_completing_on_idle_cashier_is_an_error():
    srv = make_bank(2)[1]
    with pytest.raises(RuntimeError):
        complete_service(srv, 1.0, Sampler(0), ONE_SECOND)


@pytest.mark.parametrize("lo, hi", [(0.0, 1.0), (-1.0, 1.0), (2.0, 1.0)])
def test_scan_time_must_be_positive(lo, hi):
    with pytest.raises(ConfigError):
        ScanTime(lo, hi)


@pytest.mark.parametrize("n", [0, -1, 2.0])
def test_make_bank_rejects_bad_count(n):
    with pytest.raises(ConfigError):
        make_bank(n)
