"""
Setup file.
"""

from setuptools import setup

URL = "https://github.com/maplibre/maplibre-native-rs"
KEYWORDS = "maplibre native cmake build ffi bridge static-library linker"


if __name__ == "__main__":
    setup(
        keywords=KEYWORDS,
        url=URL,
        include_package_data=True)
