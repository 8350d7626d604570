from __future__ import annotations

import pytest

from pqview_cli.shared.utils import format_file_size


@pytest.mark.parametrize(
    "num_bytes, expected",
    [
        (0, "0 bytes"),
        (999, "999 bytes"),
        (1000, "1.0 KB"),
        (1536, "1.5 KB"),
        (2_500_000, "2.5 MB"),
        (3_000_000_000, "3.0 GB"),
        (4_200_000_000_000, "4.2 TB"),
    ],
)
def test_format_file_size(num_bytes: int, expected: str) -> None:
    assert format_file_size(num_bytes) == expected
