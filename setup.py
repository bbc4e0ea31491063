from setuptools import setup, find_packages

setup(
    name="outing_core",
    version="0.1.0",
    description="Timestamp normalization, photo clustering and outing matching for birding outings",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "Pillow>=9.4",
        "piexif>=1.1",
        "pytz>=2023.3",
        "timezonefinder>=6.0",
        "pydantic>=2.0",
        "pydantic-settings>=2.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    python_requires=">=3.8",
)
