#!/usr/bin/python
# Copyright 2026 The docker-gc Authors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or
# implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import os

import setuptools

project = 'dockergc'


def parse_requirements(name):
    path = os.path.join(os.path.dirname(os.path.abspath(__file__)), name)
    with open(path) as f:
        return [line.split('#', 1)[0].strip() for line in f
                if line.strip() and not line.startswith('#')]


setuptools.setup(
    name='docker-gc',
    version='1.0.0',
    description='Reclaims stopped containers and unused images on hosts '
                'that keep creating them',
    license='Apache License (2.0)',
    author='The docker-gc Authors',
    packages=setuptools.find_packages(include=[project, project + '.*']),
    include_package_data=True,
    install_requires=parse_requirements('requirements.txt'),
    extras_require={'test': parse_requirements('test-requirements.txt')},
    python_requires='>=3.8',
    classifiers=[
        'Development Status :: 4 - Beta',
        'License :: OSI Approved :: Apache Software License',
        'Operating System :: POSIX :: Linux',
        'Programming Language :: Python :: 3',
        'Environment :: No Input/Output (Daemon)',
    ],
    entry_points={'console_scripts':
                  ['docker-gc = dockergc.cmd.gc:main'],
                  'oslo.config.opts':
                  ['dockergc = dockergc.opts:list_opts']},
    py_modules=[])
