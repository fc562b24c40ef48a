"""Progress reporting interface (port) for the repository stage."""
from review_leaderboard.domain.models import Repository


class IProgressReporter:
    """Receives per-repository progress of the pull request scan.

    The base implementation ignores everything, so the pipeline can run
    without a progress display.
    """

    def repository_started(self, repository: Repository, total_pages: int) -> None:
        pass

    def page_processed(self, repository: Repository) -> None:
        pass

    def repository_finished(self, repository: Repository) -> None:
        pass

    def close(self) -> None:
        pass
