import pytest
from src.jobs.base_job import BaseJob
from src.jobs.pageviews_per_session import PageviewsPerSession
from src.jobs.session_length import SessionLength
from src.jobs.sessions_per_user import SessionsPerUser

KEY_SESSIONS = {
    "abc": [(1000, 1500), (4000,), (39000,)],
    "def": [(10, 20, 3000)],
}


class TestMetricJobs:
    """Test observation extraction of the three session metrics."""

    def test_sessions_per_user(self):
        assert sorted(SessionsPerUser().extract(KEY_SESSIONS)) == [1, 3]

    def test_pageviews_per_session(self):
        assert sorted(PageviewsPerSession().extract(KEY_SESSIONS)) == [1, 1, 2, 3]

    def test_session_length_skips_single_event_sessions(self):
        assert sorted(SessionLength().extract(KEY_SESSIONS)) == [500, 2990]

    def test_reference_subject(self):
        abc = {"abc": KEY_SESSIONS["abc"]}

        assert list(SessionsPerUser().extract(abc)) == [3]
        assert list(PageviewsPerSession().extract(abc)) == [2, 1, 1]
        assert list(SessionLength().extract(abc)) == [500]

    def test_job_names(self):
        names = [job.name for job in (SessionsPerUser(), PageviewsPerSession(), SessionLength())]

        assert names == ["SessionsPerUser", "PageviewsPerSession", "SessionLength"]

    def test_jobs_inherit_from_base_job(self):
        assert isinstance(SessionLength(), BaseJob)

    def test_base_job_is_abstract(self):
        with pytest.raises(TypeError):
            BaseJob("x")
