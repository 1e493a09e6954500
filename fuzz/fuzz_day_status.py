import sys

import atheris

with atheris.instrument_imports():
    from worktile.day_status import CALENDAR_CAPACITY, decode_feed
    from worktile.widget import parse_size_payload


def TestOneInput(data: bytes) -> None:
    """Fuzz feed decoding; it must never raise and always fill the grid."""
    value = data.decode("utf-8", errors="ignore")

    cells = decode_feed(value)
    if len(cells) != CALENDAR_CAPACITY:
        raise RuntimeError(f"expected {CALENDAR_CAPACITY} cells, got {len(cells)}")

    parse_size_payload(value)


def main() -> None:
    atheris.Setup(sys.argv, TestOneInput)
    atheris.Fuzz()


if __name__ == "__main__":
    main()
