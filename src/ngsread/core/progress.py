"""Progress display for site-by-site loading.

Loaders do not advance one site per line read (blank and header lines are
skipped), so progress is reported by explicit ``advance()`` calls rather than
by wrapping an iterator.
"""

import sys
from collections.abc import Iterator
from contextlib import contextmanager

import progressbar


class SiteProgress:
    """Counter of loaded sites, optionally drawn as a progressbar2 bar."""

    def __init__(self, bar: progressbar.ProgressBar | None = None) -> None:
        self._bar = bar
        self.sites_done = 0

    def advance(self) -> None:
        self.sites_done += 1
        if self._bar is not None:
            self._bar.update(self.sites_done)


@contextmanager
def site_progress(
    total: int, desc: str = "", enabled: bool = True
) -> Iterator[SiteProgress]:
    """Track loaded sites with a progress bar on stdout.

    The bar is finalized in a finally block so that loader errors don't
    leave terminal output corrupted.

    Args:
        total: Number of sites expected.
        desc: Optional description prefix.
        enabled: If False, count sites without drawing anything.

    Yields:
        SiteProgress to call ``advance()`` on after each completed site.
    """
    if not enabled:
        yield SiteProgress()
        return

    widgets = [
        f"{desc}: " if desc else "",
        progressbar.Counter(),
        f"/{total} ",
        progressbar.Percentage(),
        " ",
        progressbar.Bar(),
        " ",
        progressbar.ETA(),
    ]
    bar = progressbar.ProgressBar(max_value=total, widgets=widgets, fd=sys.stdout)
    bar.start()
    try:
        yield SiteProgress(bar)
    finally:
        bar.finish()
