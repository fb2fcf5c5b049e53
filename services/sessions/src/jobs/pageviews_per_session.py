from src.jobs.base_job import BaseJob


class PageviewsPerSession(BaseJob):
    def __init__(self):
        super().__init__("PageviewsPerSession")

    def extract(self, key_sessions):
        for sessions in key_sessions.values():
            for session in sessions:
                yield len(session)
