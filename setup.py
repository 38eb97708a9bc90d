from setuptools import setup, find_packages

setup(
    name="uiauto-playback",
    version="1.0.0",
    packages=find_packages(include=["uiauto_playback", "uiauto_playback.*"]),
    install_requires=[
        "pyyaml>=5.4",
        "jsonschema>=4.0.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    python_requires=">=3.8",
    entry_points={
        "console_scripts": [
            "uiauto-playback=uiauto_playback.cli:main",
        ],
    },
    package_data={
        "uiauto_playback": ["schemas/*.json"],
    },
)
