#!/usr/bin/env python

import codecs

from setuptools import setup, find_packages
from version import get_version

with codecs.open("README.md", "r", "utf-8") as f:
    readme_md = f.read()

setup(
    name="riakrest",
    version=get_version(),
    packages=find_packages(include=["riakrest", "riakrest.*"]),
    py_modules=["version"],
    install_requires=[],
    description="Python client for Riak's HTTP interface",
    long_description=readme_md,
    long_description_content_type="text/markdown",
    zip_safe=True,
    include_package_data=True,
    license="Apache 2",
    platforms="Platform Independent",
    python_requires=">=3.6",
    test_suite="riakrest.tests.suite",
    classifiers=["License :: OSI Approved :: Apache Software License",
                 "Intended Audience :: Developers",
                 "Operating System :: OS Independent",
                 "Programming Language :: Python :: 3",
                 "Topic :: Database"]
)
