"""Run the photo blog API.

Usage:
  python -m photoblog

"""

from __future__ import annotations


def main() -> None:
    from photoblog.main import main as api_main

    api_main()


if __name__ == "__main__":
    main()
