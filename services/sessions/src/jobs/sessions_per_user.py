from src.jobs.base_job import BaseJob


class SessionsPerUser(BaseJob):
    def __init__(self):
        super().__init__("SessionsPerUser")

    def extract(self, key_sessions):
        for sessions in key_sessions.values():
            yield len(sessions)
