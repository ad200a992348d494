import os

from setuptools import setup, find_packages

with open(os.path.join(os.path.dirname(__file__), "readme.md"), "r") as fh:
    long_description = fh.read()

setup(
    name='nagrest',
    version='1.0.0',
    license='MIT',
    description='Schema driven REST resources: repositories and models over aiohttp.',
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=("tests",)),
    python_requires='>=3.8',
    install_requires=[
        'aiohttp',
        'uvloop',
        'marshmallow>=3.18',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-aiohttp>=1.0',
            'pytest-asyncio',
            'faker',
        ],
    },
    entry_points={
        'console_scripts': ['nagrest=nagrest.cli:run'],
    },
)
