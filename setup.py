#!/usr/bin/env python3
# Copyright (c) Meta Platforms, Inc. and affiliates.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import ast
import os
import re
import sys

from setuptools import find_packages, setup


assert sys.version_info >= (3, 10, 0), "soon requires Python >=3.10"
THISDIR = os.path.abspath(os.path.dirname(__file__))


def long_desc() -> str:
    with open(os.path.join(THISDIR, "README.rst"), "r") as f:
        return f.read()


def version() -> str:
    _version_re = re.compile(r"__version__\s+=\s+(?P<version>.*)")

    with open(os.path.join(THISDIR, "soon", "__init__.py"), "r") as f:
        version = _version_re.search(f.read()).group("version")
        return str(ast.literal_eval(version))


setup(
    name="soon",
    version=version(),
    license="Apache 2.0",
    description="Wait on asyncio events and awaitables under a deadline",
    long_description=long_desc(),
    long_description_content_type="text/x-rst",
    keywords=["asyncio", "timeout", "events"],
    zip_safe=True,
    packages=find_packages(include=["soon.*", "soon"]),
    python_requires=">=3.10",
    test_suite="soon.tests.base",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Framework :: AsyncIO",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: POSIX",
        "Operating System :: MacOS :: MacOS X",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3 :: Only",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
    install_requires=["async-timeout >=2.0.0,<5.0.0"],
    extras_require={"test": ["pytest"]},
    # Per PEP 561
    package_data={"soon": ["py.typed"]},
    include_package_data=True,
)
