"""tqdm progress bars, one per repository being scanned."""
import sys
from typing import Dict, Optional, TextIO

from tqdm import tqdm

from review_leaderboard.domain.models import Repository
from review_leaderboard.domain.progress_interface import IProgressReporter


class TqdmProgressReporter(IProgressReporter):
    """Shows pull request pages scanned per repository.

    Bars are written to stderr and disabled when it is not a terminal, so
    logs and piped output stay clean.
    """

    def __init__(self, stream: Optional[TextIO] = None, disable: Optional[bool] = None):
        self._stream = stream or sys.stderr
        self._disable = (not self._stream.isatty()) if disable is None else disable
        self._bars: Dict[str, tqdm] = {}

    def repository_started(self, repository: Repository, total_pages: int) -> None:
        self._bars[repository.full_name] = tqdm(
            total=total_pages,
            desc=repository.name,
            unit="page",
            file=self._stream,
            disable=self._disable,
            leave=False,
        )

    def page_processed(self, repository: Repository) -> None:
        bar = self._bars.get(repository.full_name)
        if bar is not None:
            bar.update(1)

    def repository_finished(self, repository: Repository) -> None:
        bar = self._bars.pop(repository.full_name, None)
        if bar is not None:
            bar.close()

    def close(self) -> None:
        for bar in self._bars.values():
            bar.close()
        self._bars.clear()
