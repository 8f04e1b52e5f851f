# SPDX-License-Identifier: AGPL-3.0-or-later
"""Installer for besticon package."""

import re

from setuptools import setup, find_packages

with open('besticon/version.py', encoding='utf-8') as f:
    VERSION_TAG = re.search(r'^VERSION_TAG: str = "([^"]+)"', f.read(), re.M).group(1)

with open('README.rst', encoding='utf-8') as f:
    long_description = f.read()

with open('requirements.txt') as f:
    requirements = [l.strip() for l in f.readlines() if l.strip() and not l.startswith('#')]

with open('requirements-dev.txt') as f:
    dev_requirements = [l.strip() for l in f.readlines() if l.strip() and not l.startswith('#')]

setup(
    name='besticon',
    description="Finds the best icon (favicon, touch icon, ..) of a web site.",
    long_description=long_description,
    license="AGPL-3.0-or-later",
    python_requires=">=3.10",
    version=VERSION_TAG,
    keywords='favicon icon ico apple-touch-icon http',
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Topic :: Internet",
        "Topic :: Internet :: WWW/HTTP",
        "Topic :: Multimedia :: Graphics",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
    entry_points={'console_scripts': ['besticon = besticon.__main__:app']},
    packages=find_packages(
        include=[
            'besticon',
            'besticon.*',
        ]
    ),
    package_data={
        'besticon': [
            '*.toml',
        ],
    },
    install_requires=requirements,
    extras_require={'test': dev_requirements},
)
