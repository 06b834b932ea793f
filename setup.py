"""
Setup file. Project metadata lives in pyproject.toml.
"""

from setuptools import setup

URL = "https://github.com/carguino/carguino"
KEYWORDS = "embedded arduino rust cargo xargo cross-compile firmware microcontroller"


if __name__ == "__main__":
    setup(
        keywords=KEYWORDS,
        url=URL,
        include_package_data=True)
