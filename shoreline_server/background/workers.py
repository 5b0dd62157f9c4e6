from .background_worker import BackgroundWorker
from .media_cleaner import media_cleaner


class BackgroundWorkers:
    """
    Workers running alongside the API server.

    Server calls "start" when the application starts, so the workers
    are available whenever the server is running. CLI commands
    cannot rely on them.
    """

    def __init__(self):
        self.tasks: list[BackgroundWorker] = [
            media_cleaner,
        ]

    def start(self):
        for task in self.tasks:
            task.start()

    async def shutdown(self):
        for task in self.tasks:
            await task.shutdown()


background_workers = BackgroundWorkers()
