from setuptools import find_packages, setup


def readme():
    with open("README.md") as f:
        return f.read()


setup(
    name="exifgps",
    version="0.1",
    description="Extract GPS coordinates from image metadata into a CSV file, with optional reverse geocoding.",
    long_description=readme(),
    long_description_content_type="text/markdown",
    license="MIT",
    packages=find_packages(include=["exifgps", "exifgps.*"]),
    python_requires=">=3.9",
    install_requires=[
        "pillow",
        "pydantic>=2",
        "pydantic-settings",
        "pyexiftool>=0.5",
        "requests",
        "rich",
        "structlog",
        "typer",
        "urllib3",
    ],
    extras_require={"test": ["pytest"]},
    zip_safe=False,
    entry_points={"console_scripts": ["exifgps=exifgps.cli.base:cli"]},
)
