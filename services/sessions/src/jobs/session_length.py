from src.jobs.base_job import BaseJob


class SessionLength(BaseJob):
    """Seconds between first and last event of a session.

    Single-event sessions have no length and are left out of this metric,
    though they still count towards the other two.
    """

    def __init__(self):
        super().__init__("SessionLength")

    def extract(self, key_sessions):
        for sessions in key_sessions.values():
            for session in sessions:
                if len(session) >= 2:
                    yield session[-1] - session[0]
