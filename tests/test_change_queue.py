from canvasjob.domain.geometry import ResizeSpec
from canvasjob.domain.jobs import RESIZE_KEY, ChangeQueue, ResizeJob, WriteTextJob
from canvasjob.domain.text_layout import TextJob


def text_job(content):
    job = WriteTextJob(TextJob(content))
    return job.key, job


def test_new_keys_append_in_order():
    q = ChangeQueue()
    q.enqueue(*text_job("one"))
    q.enqueue(RESIZE_KEY, ResizeJob(ResizeSpec(width=10)))
    q.enqueue(*text_job("two"))
    kinds = [type(j).__name__ for j in q]
    assert kinds == ["WriteTextJob", "ResizeJob", "WriteTextJob"]


def test_same_key_overwrites_in_place():
    q = ChangeQueue()
    q.enqueue(RESIZE_KEY, ResizeJob(ResizeSpec(width=10)))
    q.enqueue(*text_job("caption"))
    q.enqueue(RESIZE_KEY, ResizeJob(ResizeSpec(width=10, height=20)))
    assert len(q) == 2
    first = q.jobs[0]
    assert isinstance(first, ResizeJob)
    assert first.spec == ResizeSpec(width=10, height=20)


def test_drain_runs_once_per_dirty_cycle():
    q = ChangeQueue()
    q.enqueue(*text_job("a"))
    q.enqueue(*text_job("b"))
    seen = []
    assert q.drain(seen.append) is False  # never dirtied

    q.mark_dirty()
    assert q.drain(seen.append) is True
    assert [j.text.content for j in seen] == ["a", "b"]
    assert q.drain(seen.append) is False
    assert len(seen) == 2
    assert len(q) == 2  # contents survive draining

    q.mark_dirty()
    q.drain(seen.append)
    assert len(seen) == 4


def test_clear_empties_and_resets_dirty():
    q = ChangeQueue()
    q.enqueue(*text_job("a"))
    q.mark_dirty()
    q.clear()
    assert len(q) == 0
    assert q.dirty is False
