from osm_geocode.geocoding import ThrottleScheduler


def test_sleeps_delay_in_seconds(sleeps, fake_sleep):
    throttle = ThrottleScheduler(sleep=fake_sleep)

    throttle.wait_between(False, 2_000_000)

    assert sleeps == [2.0]
    assert throttle.waits == 1


def test_no_wait_after_last_record(sleeps, fake_sleep):
    throttle = ThrottleScheduler(sleep=fake_sleep)

    throttle.wait_between(True, 2_000_000)

    assert sleeps == []


def test_non_positive_delay_never_waits(sleeps, fake_sleep):
    throttle = ThrottleScheduler(sleep=fake_sleep)

    throttle.wait_between(False, 0)
    throttle.wait_between(False, -5)

    assert sleeps == []
    assert throttle.waits == 0
