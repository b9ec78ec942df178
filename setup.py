import pathlib

import setuptools

here = pathlib.Path(__file__).parent.resolve()

long_description = (here / "README.md").read_text(encoding="utf-8")

setuptools.setup(
    name="hive-engine-client",
    version="0.1.0",
    description="Engine API client used by hive simulators to drive execution clients",
    long_description=long_description,
    long_description_content_type="text/markdown",
    python_requires=">=3.11",
    packages=setuptools.find_packages(
        include=[
            "hive_engine_client*",
            "hive_engine_base_types*",
            "config*",
            "pytest_plugins*",
        ]
    ),
    install_requires=[
        "pydantic>=2.10,<3",
        "requests>=2.31,<3",
        "PyJWT>=2.8,<3",
        "PyYAML>=6.0,<7",
        "pytest>=8,<9",
    ],
    extras_require={
        "test": [
            "pytest>=8,<9",
        ],
    },
)
