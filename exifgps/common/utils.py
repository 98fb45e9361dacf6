import csv
import pathlib
from typing import Iterable, Sequence

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .types import FilePath


def get_http_session(
    max_retries: int = 3,
    backoff_factor: float = 0.5,
    status_forcelist: tuple[int, ...] = (500, 502, 503, 504),
) -> requests.Session:
    """
    Create a requests session that retries failed requests.

    Retries apply to both http:// and https:// URLs. Status codes are not
    raised by the retry machinery, the caller is expected to call
    `raise_for_status()` on the final response.

    >>> session = get_http_session(max_retries=0)
    >>> session.adapters["https://"].max_retries.total
    0
    """
    retry = Retry(
        total=max_retries,
        backoff_factor=backoff_factor,
        status_forcelist=status_forcelist,
        allowed_methods=["GET", "POST"],
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)

    session = requests.Session()
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


def export_rows(
    rows: Iterable[Sequence[str]],
    header: Sequence[str],
    filepath: FilePath,
) -> pathlib.Path:
    """
    Write a header and rows to a CSV file, overwriting any existing file.

    The header is always written, so an empty iterable of rows produces
    a file containing only the header.
    """
    filepath = pathlib.Path(filepath)
    if not filepath.parent.exists():
        filepath.parent.mkdir(parents=True, exist_ok=True)

    with open(filepath, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for row in rows:
            writer.writerow(row)

    return filepath
