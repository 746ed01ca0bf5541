from setuptools import setup, find_packages


setup(
    name="pbptool",
    version="0.1",
    packages=find_packages(include=["pbptool", "pbptool.*"]),
    description="Pack, unpack and analyze PBP containers (40-byte header, eight positional sections).",
    author="vercingetorx",
    python_requires=">=3.8",
    install_requires=[],
    entry_points={
        "console_scripts": [
            "pbptool=pbptool.cli:main",
        ]
    },
)
