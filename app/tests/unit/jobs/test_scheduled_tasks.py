import pytest
import schedule

from jobs.scheduled_tasks import run_continuously, safe_run


@pytest.mark.unit
def test_safe_run_returns_result():
    def job(value):
        return value * 2

    wrapped = safe_run(job)

    assert wrapped(3) == 6
    assert wrapped.__name__ == "job"


@pytest.mark.unit
def test_safe_run_swallows_job_errors():
    def job():
        raise RuntimeError("boom")

    assert safe_run(job)() is None


@pytest.mark.unit
def test_run_continuously_can_be_stopped():
    scheduler = schedule.Scheduler()

    stop_event = run_continuously(scheduler, interval=0.01)
    stop_event.set()

    assert stop_event.is_set()
